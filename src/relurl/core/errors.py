"""Exceptions raised by the URL engine."""


class UrlError(Exception):
    """Base class for relurl errors."""


class MalformedUrlError(UrlError, ValueError):
    """URL string violates basic structural rules (e.g. non-numeric port)."""


class InvalidArgumentError(UrlError, ValueError):
    """A required argument is absent."""
