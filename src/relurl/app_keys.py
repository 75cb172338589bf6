"""Application keys for type-safe app configuration access."""

from aiohttp import web

from relurl.core.deployment import DeploymentPath

deployment_key = web.AppKey("deployment", DeploymentPath)

# Per-request renderer installed by url_renderer_middleware
RENDERER_KEY = "relurl.url_renderer"
