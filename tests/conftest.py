"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path

import pytest
from relurl.core.renderer import UrlRenderer
from relurl.core.url import Url


@pytest.fixture
def make_renderer() -> Callable[..., UrlRenderer]:
    """Create renderers from a base URL string and optional mount paths."""

    def _make(
        base: str,
        context_path: str | None = None,
        filter_path: str | None = None,
    ) -> UrlRenderer:
        return UrlRenderer(
            Url.parse(base),
            context_path=context_path,
            filter_path=filter_path,
        )

    return _make


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Write a relurl.toml with a deployment and a base URL."""
    path = tmp_path / "relurl.toml"
    path.write_text("""
[deployment]
context_path = "/app"
filter_path = "wicket"

[base]
url = "http://localhost:8080/app/wicket/a/b/c"
""")
    return path
