"""
Engine error taxonomy.

Every public engine operation fails with one of these. None of them leaves
partial writes behind: the unit of work rolls the transaction back before the
error reaches the caller.
"""

from typing import Optional


class EngineError(Exception):
    """Base class for workout engine failures."""

    error_code = "ENGINE_ERROR"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(EngineError):
    """Malformed input, rejected before any write."""

    error_code = "VALIDATION_ERROR"

    def __init__(self, detail: str, field: Optional[str] = None):
        super().__init__(detail)
        self.field = field


class ConflictError(EngineError):
    """Business rule violation (duplicate active session, completed session, ...)."""

    error_code = "CONFLICT"


class NotFoundError(EngineError):
    """
    Unknown resource.

    Also raised for resources owned by another user so callers cannot probe
    for the existence of other users' sessions or sets.
    """

    error_code = "NOT_FOUND"

    def __init__(self, resource: str, identifier=None):
        detail = f"{resource} not found"
        if identifier is not None:
            detail = f"{detail}: {identifier}"
        super().__init__(detail)
        self.resource = resource


class ForbiddenError(EngineError):
    """Caller lacks a required capability (e.g. admin)."""

    error_code = "FORBIDDEN"


class StoreError(EngineError):
    """Record store failure (connectivity, timeout, aborted transaction)."""

    error_code = "STORE_ERROR"
