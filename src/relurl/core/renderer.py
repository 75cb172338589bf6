"""URL rendering against the current request.

Turns target URLs into the strings emitted in links and redirects: a path
relative to the URL the browser currently has loaded when possible, a full
absolute URL when the target lives on another scheme, host or port.
"""

from __future__ import annotations

import logging

from relurl.core.deployment import DeploymentPath, is_anchored
from relurl.core.errors import InvalidArgumentError
from relurl.core.url import DEFAULT_PORTS, Url, remove_dot_segments

logger = logging.getLogger(__name__)


class UrlRenderer:
    """Renders target URLs relative to a base URL.

    The base URL is the URL the client has loaded. The deployment path
    (context path and filter path) is removed from absolute URLs before
    their segments are compared.
    """

    def __init__(
        self,
        base_url: Url,
        *,
        context_path: str | None = None,
        filter_path: str | None = None,
        deployment: DeploymentPath | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            base_url: URL of the current request
            context_path: Mount path of the application (e.g., "/app")
            filter_path: Mount path of the dispatcher below the context path
            deployment: Already parsed deployment path, used instead of
                        context_path and filter_path when given

        Raises:
            InvalidArgumentError: If base_url is None
        """
        if base_url is None:
            raise InvalidArgumentError("base_url must not be None")
        self._base_url = base_url
        if deployment is None:
            deployment = DeploymentPath.from_paths(context_path, filter_path)
        self._deployment = deployment

    @property
    def base_url(self) -> Url:
        """URL the rendered references are relative to."""
        return self._base_url

    @property
    def deployment(self) -> DeploymentPath:
        return self._deployment

    @property
    def context_path(self) -> str:
        return self._deployment.context_path

    @property
    def filter_path(self) -> str:
        return self._deployment.filter_path

    def set_base_url(self, base_url: Url) -> Url:
        """Replace the base URL.

        Needed when the URL seen by the transport layer lost parts of the
        client URL (scheme, host or port).

        Args:
            base_url: New base URL

        Returns:
            The previous base URL

        Raises:
            InvalidArgumentError: If base_url is None
        """
        if base_url is None:
            raise InvalidArgumentError("base_url must not be None")
        previous = self._base_url
        self._base_url = base_url
        return previous

    def render_url(self, url: Url) -> str:
        """Render a URL as the shortest reference the browser resolves to it.

        Protocol-relative and slash-rooted URLs are returned as written.
        URLs on another scheme, host or port become full URLs; all others
        become paths relative to the base URL.

        Args:
            url: Target URL

        Returns:
            Rendered reference
        """
        if url.is_protocol_relative or url.is_context_absolute:
            logger.debug(f"Rendering {url} as written")
            return url.to_string()

        if url.context_relative and url.host is None:
            return self.render_context_relative_url(url.to_string())

        if self.should_render_as_full(url):
            logger.debug(f"Rendering {url} as full URL against {self._base_url}")
            return self._render_absolute(url)

        return self.render_relative_url(url)

    def should_render_as_full(self, url: Url) -> bool:
        """Whether the URL's scheme, host or port differs from the base URL.

        Ports of host-qualified URLs are compared after the scheme's default
        port is filled in. A URL without a host only switches the scheme and
        shares the base's server otherwise.
        """
        base = self._base_url
        if url.scheme is not None and url.scheme != base.scheme:
            return True
        if url.host is None:
            return url.port is not None and url.port != base.port
        if url.host != base.host:
            return True
        scheme = url.scheme or base.scheme
        return _effective_port(scheme, url.port) != _effective_port(base.scheme, base.port)

    def render_relative_url(self, url: Url) -> str:
        """Render a URL as a path relative to the base URL.

        Host-qualified URLs are rendered relative as well, after the
        deployment path has been removed from them.

        Args:
            url: Target URL

        Returns:
            Relative reference starting with "./" or "../", or "."
        """
        deployment = self._deployment
        if self._crosses_deployment(url):
            # Only one side is mounted; compare both from the server root
            base_segments = deployment.anchor(self._base_url)
            target_segments = deployment.anchor(url)
        else:
            base_segments = deployment.strip(self._base_url)
            target_segments = deployment.strip(url)

            # A rooted target compared with an unrooted base
            if target_segments[:1] == [""] and base_segments[:1] != [""]:
                target_segments = target_segments[1:]

        path = relative_path(base_segments, target_segments)
        rendered = path + _suffix(url)
        logger.debug(f"Rendered {url} relative to {self._base_url} as {rendered}")
        return rendered

    def render_context_relative_url(self, path: str | None) -> str:
        """Render a path given relative to the context root.

        Args:
            path: Path below the context root, e.g. "/css/site.css"

        Returns:
            Reference relative to the base URL

        Raises:
            InvalidArgumentError: If path is None
        """
        if path is None:
            raise InvalidArgumentError("path must not be None")

        url = Url.parse(path)
        segments = list(url.segments)
        if url.has_root:
            segments = segments[1:]
        remainder = "/".join(segments)

        deployment = self._deployment
        base = self._base_url
        if base.host is not None and not deployment.in_context(base):
            # Base outside the context; walk over the server root instead
            target = ["", *deployment.context_segments, *(segments or [""])]
            rendered = relative_path(deployment.anchor(base), target)
        else:
            depth = deployment.depth_below_context(base)
            if depth > 0:
                rendered = "../" * depth + remainder
            else:
                rendered = f"./{remainder}"

        rendered = _close_parent_reference(rendered) + _suffix(url)
        logger.debug(f"Rendered context path {path!r} as {rendered}")
        return rendered

    def render_full_url(self, url: Url) -> str:
        """Render a URL as a full absolute URL.

        Full URLs only have their dot segments removed. Anything else is
        resolved against the base URL first.

        Args:
            url: Target URL

        Returns:
            Absolute URL, or a rooted path when the base has no host
        """
        if url.is_full:
            resolved = url.with_segments(remove_dot_segments(_rooted(url.segments)))
        else:
            resolved = self._base_url.resolve(url)
            resolved = resolved.with_segments(_rooted(resolved.segments))

        rendered = _absolute_string(resolved)
        logger.debug(f"Rendered {url} as full URL {rendered}")
        return rendered

    def _crosses_deployment(self, url: Url) -> bool:
        """Whether exactly one of base and target lies below the deployment path.

        Only decided for host-qualified bases, whose path is known to start
        at the server root. Relative targets count as mounted.
        """
        base = self._base_url
        deployment = self._deployment
        if not deployment.prefix or base.host is None or base.context_relative:
            return False
        if url.context_relative:
            return False
        target_mounted = deployment.contains(url) if is_anchored(url) else True
        return deployment.contains(base) != target_mounted

    def _render_absolute(self, url: Url) -> str:
        """Render a URL on its own server, filling gaps from the base URL."""
        base = self._base_url
        host = url.host if url.host is not None else base.host
        port = url.port
        if port is None and url.host is None:
            port = base.port

        segments = _rooted(list(url.segments))
        resolved = Url(
            segments=tuple(remove_dot_segments(segments)),
            query_parameters=url.query_parameters,
            scheme=url.scheme or base.scheme,
            host=host,
            port=port,
            fragment=url.fragment,
        )
        return _absolute_string(resolved)


def relative_path(base: list[str], target: list[str]) -> str:
    """Compute the relative path from one segment sequence to another.

    The last segment of each sequence is the addressed resource; the
    preceding segments are its directories.

    Args:
        base: Segments of the base URL
        target: Segments of the target URL

    Returns:
        Path starting with "./" or "../", or "." for the base directory
    """
    base_dirs = base[:-1]
    target_dirs = target[:-1]
    leaf = target[-1] if target else ""

    common = 0
    for base_dir, target_dir in zip(base_dirs, target_dirs, strict=False):
        if base_dir != target_dir:
            break
        common += 1

    ups = len(base_dirs) - common
    remainder = "/".join([*target_dirs[common:], leaf])

    if ups > 0:
        path = "../" * ups + remainder
    elif remainder:
        path = f"./{remainder}"
    elif base:
        path = "."
    else:
        path = "./"

    return _close_parent_reference(path)


def _close_parent_reference(path: str) -> str:
    # Some containers mishandle a URL ending in ".."
    if path.endswith("/.."):
        return f"{path}/"
    return path


def _effective_port(scheme: str | None, port: int | None) -> int | None:
    if port is not None:
        return port
    return DEFAULT_PORTS.get(scheme) if scheme is not None else None


def _rooted(segments: list[str] | tuple[str, ...]) -> list[str]:
    if segments and segments[0] == "":
        return list(segments)
    return ["", *segments]


def _suffix(url: Url) -> str:
    suffix = ""
    if url.query_parameters:
        suffix += f"?{url.query_string}"
    if url.fragment is not None:
        suffix += f"#{url.fragment}"
    return suffix


def _absolute_string(url: Url) -> str:
    """Serialize a resolved URL, leaving out the scheme's default port."""
    if url.port is not None and url.scheme is not None:
        if DEFAULT_PORTS.get(url.scheme) == url.port:
            url = url.with_port(None)
    if url.host is None:
        # Nothing to qualify the path with
        return Url(
            segments=url.segments,
            query_parameters=url.query_parameters,
            fragment=url.fragment,
        ).to_string()
    return url.to_string()
