"""
inkengine/errors.py -- Exception types raised by the InkAlchemy engine.

The search and tag functions never raise on empty or absent input; these
errors are reserved for the connection-authoring boundary and graph
mutation, where silently doing nothing would hide a caller bug.
"""

from __future__ import annotations


class InkEngineError(Exception):
    """Base class for all engine errors."""


class ValidationError(InkEngineError, ValueError):
    """A value is not permitted for the given field.

    Parameters
    ----------
    field : str
        The offending field (e.g. ``"connectionType"``).
    allowed : list[str]
        The permitted values, in vocabulary order.
    value : str, optional
        The rejected value, for the message.
    """

    def __init__(self, field: str, allowed: list[str], value: str | None = None):
        self.field = field
        self.allowed = list(allowed)
        self.value = value
        if value:
            message = f"'{value}' is not a valid {field}"
        else:
            message = f"{field} is required"
        if self.allowed:
            message += f"; expected one of: {', '.join(self.allowed)}"
        super().__init__(message)


class NotFoundError(InkEngineError, LookupError):
    """An entity could not be resolved from the supplied listing."""

    def __init__(self, entity_type: str, entity_id):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"No {entity_type} with id {entity_id!r} is available")
