"""aiohttp integration.

Builds a UrlRenderer for each request from the URL the client requested
and the deployment path registered on the application.
"""

from typing import NoReturn

from aiohttp import web
from aiohttp.typedefs import Handler

from relurl.app_keys import RENDERER_KEY, deployment_key
from relurl.core.deployment import DeploymentPath
from relurl.core.renderer import UrlRenderer
from relurl.core.url import Url


def setup_url_rendering(
    app: web.Application,
    deployment: DeploymentPath | None = None,
) -> None:
    """Register the deployment path and the renderer middleware.

    Args:
        app: Application to configure
        deployment: Mount point of the application, empty when None
    """
    app[deployment_key] = deployment or DeploymentPath()
    app.middlewares.append(url_renderer_middleware)


def renderer_for_request(request: web.Request) -> UrlRenderer:
    """Create a renderer whose base is the URL of the request."""
    deployment = request.app.get(deployment_key) or DeploymentPath()
    return UrlRenderer(Url.parse(str(request.url)), deployment=deployment)


def get_renderer(request: web.Request) -> UrlRenderer:
    """Get the request's renderer, creating one outside the middleware."""
    renderer = request.get(RENDERER_KEY)
    if renderer is None:
        renderer = renderer_for_request(request)
        request[RENDERER_KEY] = renderer
    return renderer


@web.middleware
async def url_renderer_middleware(
    request: web.Request,
    handler: Handler,
) -> web.StreamResponse:
    request[RENDERER_KEY] = renderer_for_request(request)
    return await handler(request)


def redirect(request: web.Request, target: Url | str) -> NoReturn:
    """Redirect the client to a target rendered against the request URL.

    Raises:
        web.HTTPFound: Always, with the rendered Location header
    """
    url = Url.parse(target) if isinstance(target, str) else target
    raise web.HTTPFound(location=get_renderer(request).render_url(url))
