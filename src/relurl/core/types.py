"""Core type definitions."""

from typing import Literal, TypedDict

# How a target is turned into a reference (see UrlRenderer)
RenderMode = Literal["auto", "relative", "full", "context"]


class QueryParameterDict(TypedDict):
    """Dictionary representation of a query parameter."""

    name: str
    value: str


class UrlDict(TypedDict):
    """Dictionary representation of a Url for JSON serialization."""

    scheme: str | None
    host: str | None
    port: int | None
    segments: list[str]
    query: list[QueryParameterDict]
    fragment: str | None
    context_relative: bool
