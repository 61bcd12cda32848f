"""Errors raised by the backlog store."""


class BacklogError(Exception):
    """Base class for backlog store failures."""


class NotFoundError(BacklogError):
    """No item exists for the requested id."""


class InvalidArgumentError(BacklogError):
    """A field is missing, malformed, or not allowed."""
