"""URL value type.

Immutable structured representation of an absolute or relative URL.
Parsing keeps segments raw: dot segments, percent-encoding and path
parameters (``;jsessionid=...``) are preserved literally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from relurl.core.errors import InvalidArgumentError, MalformedUrlError
from relurl.core.types import UrlDict

_SCHEME_RE = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*)://")

DEFAULT_PORTS: dict[str, int] = {"http": 80, "https": 443}


@dataclass(frozen=True)
class QueryParameter:
    """Single query string parameter.

    ``explicit_empty`` records an empty value written with its equals
    sign (``?x=``), which renders differently from a bare ``?x``.
    """

    name: str
    value: str = ""
    explicit_empty: bool = False

    def __str__(self) -> str:
        if self.value or self.explicit_empty:
            return f"{self.name}={self.value}"
        return self.name


@dataclass(frozen=True)
class Url:
    """Structured URL.

    An empty segment at position 0 denotes a leading slash, a trailing
    empty segment denotes a trailing slash. Instances never change; the
    ``with_*`` methods return modified copies.
    """

    segments: tuple[str, ...] = ()
    query_parameters: tuple[QueryParameter, ...] = ()
    scheme: str | None = None
    host: str | None = None
    port: int | None = None
    fragment: str | None = None
    context_relative: bool = False

    def __post_init__(self) -> None:
        if self.segments is None:
            raise InvalidArgumentError("segments must not be None")
        segments = tuple(self.segments)
        if any(segment is None for segment in segments):
            raise InvalidArgumentError("segments must not contain None")
        object.__setattr__(self, "segments", segments)

        if self.query_parameters is None:
            raise InvalidArgumentError("query_parameters must not be None")
        object.__setattr__(self, "query_parameters", tuple(self.query_parameters))

    @classmethod
    def parse(cls, raw: str) -> Url:
        """Parse a URL string.

        Args:
            raw: Absolute, protocol-relative or relative URL

        Returns:
            Url instance; relative when no scheme/host is present

        Raises:
            MalformedUrlError: If the string is structurally invalid
        """
        if not isinstance(raw, str):
            raise MalformedUrlError(f"URL must be a string, got {type(raw).__name__}")

        rest, sep, fragment_text = raw.partition("#")
        fragment = fragment_text if sep else None

        rest, sep, query_text = rest.partition("?")
        query = _parse_query(query_text) if sep else ()

        scheme: str | None = None
        host: str | None = None
        port: int | None = None

        match = _SCHEME_RE.match(rest)
        if match is not None:
            scheme = match.group(1).lower()
            rest = rest[match.end() :]
            host, port, rest = _split_authority(rest, raw)
        elif rest.startswith("//"):
            host, port, rest = _split_authority(rest[2:], raw)

        segments = tuple(rest.split("/")) if rest else ()

        return cls(
            segments=segments,
            query_parameters=query,
            scheme=scheme,
            host=host,
            port=port,
            fragment=fragment,
        )

    @property
    def path(self) -> str:
        """Path component, without query or fragment."""
        if self.segments == ("",):
            return "/"
        path = "/".join(self.segments)
        if self.host is not None and path and not path.startswith("/"):
            return f"/{path}"
        return path

    @property
    def query_string(self) -> str:
        """Query component without the leading question mark."""
        return "&".join(str(param) for param in self.query_parameters)

    @property
    def is_full(self) -> bool:
        """Whether the URL carries both scheme and host."""
        return self.scheme is not None and self.host is not None

    @property
    def is_protocol_relative(self) -> bool:
        """Whether the URL has a host but no scheme (``//host/path``)."""
        return self.host is not None and self.scheme is None

    @property
    def has_root(self) -> bool:
        """Whether the path starts with a slash."""
        return bool(self.segments) and self.segments[0] == ""

    @property
    def is_context_absolute(self) -> bool:
        """Whether this is a server-rooted path without scheme or host."""
        return (
            self.scheme is None
            and self.host is None
            and not self.context_relative
            and self.has_root
        )

    def get_query_parameter(self, name: str) -> QueryParameter | None:
        """Get the first query parameter with the given name."""
        for param in self.query_parameters:
            if param.name == name:
                return param
        return None

    def get_query_parameters(self, name: str) -> list[QueryParameter]:
        """Get all query parameters with the given name, in order."""
        return [param for param in self.query_parameters if param.name == name]

    def with_scheme(self, scheme: str | None) -> Url:
        return replace(self, scheme=scheme.lower() if scheme else scheme)

    def with_host(self, host: str | None) -> Url:
        return replace(self, host=host)

    def with_port(self, port: int | None) -> Url:
        return replace(self, port=port)

    def with_fragment(self, fragment: str | None) -> Url:
        return replace(self, fragment=fragment)

    def with_context_relative(self, context_relative: bool = True) -> Url:
        return replace(self, context_relative=context_relative)

    def with_segments(self, segments: list[str] | tuple[str, ...]) -> Url:
        return replace(self, segments=tuple(segments))

    def append_segments(self, *segments: str) -> Url:
        """Return a copy with the given segments added at the end.

        A trailing empty segment (trailing slash) is replaced rather than
        kept in the middle of the path.
        """
        current = list(self.segments)
        if segments and current and current[-1] == "" and len(current) > 1:
            current.pop()
        return replace(self, segments=(*current, *segments))

    def prepend_segments(self, *segments: str) -> Url:
        return replace(self, segments=(*segments, *self.segments))

    def concat_segments(self, *segments: str) -> Url:
        """Append segments relative to the current directory.

        The last segment of this URL is treated as a file and replaced;
        ``..`` removes the previous directory and ``.`` is dropped.
        """
        current = list(self.segments[:-1]) if self.segments else []
        for segment in segments:
            if segment == ".":
                continue
            if segment == "..":
                if current and current[-1] != "":
                    current.pop()
                continue
            current.append(segment)
        if segments and segments[-1] in (".", ".."):
            current.append("")
        return replace(self, segments=tuple(current))

    def with_query_parameter(self, name: str, value: str = "") -> Url:
        """Return a copy with the parameter appended (duplicates allowed)."""
        return replace(
            self,
            query_parameters=(*self.query_parameters, QueryParameter(name, value)),
        )

    def set_query_parameter(self, name: str, value: str = "") -> Url:
        """Return a copy where the parameter replaces every previous value."""
        kept = tuple(param for param in self.query_parameters if param.name != name)
        return replace(self, query_parameters=(*kept, QueryParameter(name, value)))

    def without_query_parameter(self, name: str) -> Url:
        return replace(
            self,
            query_parameters=tuple(p for p in self.query_parameters if p.name != name),
        )

    def with_query_parameters(
        self,
        params: list[QueryParameter] | tuple[QueryParameter, ...],
    ) -> Url:
        return replace(self, query_parameters=tuple(params))

    def normalized(self) -> Url:
        """Return a copy with ``.`` and ``..`` segments removed."""
        return replace(self, segments=tuple(remove_dot_segments(self.segments)))

    def resolve(self, reference: Url) -> Url:
        """Resolve a reference against this URL (RFC 3986, section 5.2.2).

        Args:
            reference: Relative, rooted, protocol-relative or full URL

        Returns:
            Resolved Url with dot segments removed
        """
        if reference.host is not None:
            segments = remove_dot_segments(reference.segments)
            return replace(
                reference,
                scheme=reference.scheme or self.scheme,
                segments=tuple(_rooted(segments)) if segments else (),
                context_relative=False,
            )

        query = reference.query_parameters
        if not reference.segments:
            segments = list(self.segments)
            if not query:
                query = self.query_parameters
        elif reference.has_root:
            segments = remove_dot_segments(reference.segments)
        else:
            segments = remove_dot_segments(_merge(self, reference.segments))

        return Url(
            segments=tuple(segments),
            query_parameters=query,
            scheme=reference.scheme or self.scheme,
            host=self.host,
            port=self.port,
            fragment=reference.fragment,
        )

    def to_string(self) -> str:
        """Canonical string form.

        A scheme without a host is omitted; such a URL only asks the
        renderer to switch schemes.
        """
        result = ""
        if self.host is not None:
            result = f"{self.scheme}://" if self.scheme else "//"
            result += self.host
            if self.port is not None:
                result += f":{self.port}"
        result += self.path
        if self.query_parameters:
            result += f"?{self.query_string}"
        if self.fragment is not None:
            result += f"#{self.fragment}"
        return result

    def to_dict(self) -> UrlDict:
        """Convert to dictionary for JSON serialization."""
        return {
            "scheme": self.scheme,
            "host": self.host,
            "port": self.port,
            "segments": list(self.segments),
            "query": [{"name": p.name, "value": p.value} for p in self.query_parameters],
            "fragment": self.fragment,
            "context_relative": self.context_relative,
        }

    def __str__(self) -> str:
        return self.to_string()


def remove_dot_segments(segments: list[str] | tuple[str, ...]) -> list[str]:
    """Remove ``.`` and ``..`` segments.

    ``..`` removes the previous segment, or is dropped at the root. A
    trailing dot segment leaves a trailing empty segment so the result
    still addresses a directory.

    Args:
        segments: Path segments, rooted when the first one is empty

    Returns:
        New list of segments
    """
    rooted = bool(segments) and segments[0] == ""
    body = segments[1:] if rooted else segments

    output: list[str] = []
    for segment in body:
        if segment == ".":
            continue
        if segment == "..":
            if output:
                output.pop()
            continue
        output.append(segment)

    if body and body[-1] in (".", ".."):
        output.append("")

    return ["", *output] if rooted else output


def _rooted(segments: list[str]) -> list[str]:
    if segments and segments[0] == "":
        return segments
    return ["", *segments]


def _merge(base: Url, reference: tuple[str, ...]) -> list[str]:
    # An authority with an empty path merges as "/" + reference
    if base.host is not None and not base.segments:
        return ["", *reference]
    return [*base.segments[:-1], *reference]


def _parse_query(text: str) -> tuple[QueryParameter, ...]:
    params: list[QueryParameter] = []
    for part in text.split("&"):
        if not part:
            continue
        name, sep, value = part.partition("=")
        explicit_empty = bool(sep) and not value
        params.append(QueryParameter(name, value, explicit_empty))
    return tuple(params)


def _split_authority(rest: str, raw: str) -> tuple[str, int | None, str]:
    """Split ``host[:port]/path`` into host, port and the remaining path."""
    slash = rest.find("/")
    if slash == -1:
        authority, path = rest, ""
    else:
        authority, path = rest[:slash], rest[slash:]

    userinfo, at, authority = authority.rpartition("@")

    port_text: str | None = None
    if authority.startswith("["):
        end = authority.find("]")
        if end == -1:
            raise MalformedUrlError(f"Unterminated IPv6 host in URL: {raw}")
        host = authority[: end + 1]
        tail = authority[end + 1 :]
        if tail:
            if not tail.startswith(":"):
                raise MalformedUrlError(f"Invalid authority in URL: {raw}")
            port_text = tail[1:]
    else:
        host, sep, port_part = authority.rpartition(":")
        if sep:
            port_text = port_part
        else:
            host = authority

    port: int | None = None
    if port_text is not None:
        if not port_text.isdigit() or not port_text.isascii():
            raise MalformedUrlError(f"Invalid port '{port_text}' in URL: {raw}")
        port = int(port_text)
        if port > 65535:
            raise MalformedUrlError(f"Port out of range in URL: {raw}")

    if at:
        host = f"{userinfo}@{host}"
    return host, port, path
