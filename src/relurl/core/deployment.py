"""Deployment mount point handling.

The deployment path is the context path of the application followed by
the filter path of the request dispatcher. Segment sequences taken from
absolute URLs still carry that prefix and have it removed before relative
references are computed. Matching is anchored at the first segment below
the root; text that merely looks like the prefix deeper in the path is
left alone.
"""

from __future__ import annotations

from dataclasses import dataclass

from relurl.core.url import Url


def split_mount_path(path: str | None) -> tuple[str, ...]:
    """Split a mount path into its non-empty segments.

    Args:
        path: Mount path such as "/app", "context/path" or "/"

    Returns:
        Tuple of segments, empty for "", "/" and None
    """
    if not path:
        return ()
    return tuple(segment for segment in path.split("/") if segment)


def _segment_name(segment: str) -> str:
    """Segment text without path parameters (``;jsessionid=...``)."""
    return segment.partition(";")[0]


@dataclass(frozen=True)
class DeploymentPath:
    """Context path and filter path of a deployment."""

    context_segments: tuple[str, ...] = ()
    filter_segments: tuple[str, ...] = ()

    @classmethod
    def from_paths(
        cls,
        context_path: str | None = None,
        filter_path: str | None = None,
    ) -> DeploymentPath:
        return cls(
            context_segments=split_mount_path(context_path),
            filter_segments=split_mount_path(filter_path),
        )

    @property
    def context_path(self) -> str:
        return "/".join(self.context_segments)

    @property
    def filter_path(self) -> str:
        return "/".join(self.filter_segments)

    @property
    def prefix(self) -> tuple[str, ...]:
        """Context segments followed by filter segments."""
        return self.context_segments + self.filter_segments

    def strip(self, url: Url) -> list[str]:
        """Get the segments of a URL with the deployment prefix removed.

        Relative and context-relative URLs are returned as they are.
        Host-qualified and slash-rooted URLs lose their root and the
        deployment prefix when the prefix matches at the start of the path;
        otherwise they keep a leading empty root segment.

        Args:
            url: URL to take the segments from

        Returns:
            New list of segments
        """
        if not is_anchored(url):
            return list(url.segments)

        body = _body(url)
        prefix = self.prefix
        if prefix and _starts_with(body, prefix):
            return body[len(prefix) :]
        return ["", *body]

    def contains(self, url: Url) -> bool:
        """Whether an anchored URL lies below a non-empty deployment path."""
        prefix = self.prefix
        return bool(prefix) and is_anchored(url) and _starts_with(_body(url), prefix)

    def in_context(self, url: Url) -> bool:
        """Whether a URL lies below the context path.

        Always true without a context path and for URLs that are not
        anchored at the server root.
        """
        if not self.context_segments or not is_anchored(url):
            return True
        return _starts_with(_body(url), self.context_segments)

    def anchor(self, url: Url) -> list[str]:
        """Get the rooted segments of a URL as seen from the server root.

        Anchored URLs keep their own path. Relative URLs are taken to be
        relative to the filter path and get the deployment prefix in front.

        Args:
            url: URL to take the segments from

        Returns:
            New list of segments starting with the root marker
        """
        if is_anchored(url):
            return ["", *_body(url)]
        return ["", *self.prefix, *url.segments]

    def depth_below_context(self, url: Url) -> int:
        """Count the directories between the context root and a URL.

        A relative URL is taken to be relative to the filter path, so the
        filter segments add to its depth.

        Args:
            url: Base URL of the current request

        Returns:
            Number of "../" steps that lead back to the context root
        """
        segments = list(url.segments)
        if url.context_relative or url.host is not None or url.has_root:
            body = segments[1:] if url.has_root else segments
            if not url.context_relative and self.context_segments:
                if _starts_with(body, self.context_segments):
                    body = body[len(self.context_segments) :]
            return max(len(body) - 1, 0)
        return max(len(segments) - 1, 0) + len(self.filter_segments)


def _starts_with(segments: list[str], prefix: tuple[str, ...]) -> bool:
    if len(segments) < len(prefix):
        return False
    return all(
        _segment_name(segment) == expected
        for segment, expected in zip(segments, prefix, strict=False)
    )


def is_anchored(url: Url) -> bool:
    """Whether a URL's path starts at the server root.

    Host-qualified and slash-rooted URLs are anchored; relative and
    context-relative ones are not.
    """
    if url.context_relative:
        return False
    return url.host is not None or url.has_root


def _body(url: Url) -> list[str]:
    segments = list(url.segments)
    return segments[1:] if url.has_root else segments
