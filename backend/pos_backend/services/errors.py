"""
Error taxonomy shared by the sale recorder and the inventory adjuster.

Every error implies zero durable side effects for the operation that raised
it. status_code is the HTTP status the request layer answers with.
"""

from __future__ import annotations


class PosError(Exception):
    """Base for recoverable core errors."""
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.details:
            body["details"] = self.details
        return body


class InvalidInput(PosError, ValueError):
    """Malformed, missing or out-of-enum request data. Raised before any write."""
    status_code = 400


class NotFound(PosError):
    """A referenced product does not exist."""
    status_code = 404


class InvalidOperation(PosError):
    """Business rule violation, e.g. an adjustment that would drive stock negative."""
    status_code = 400


class StorageFailure(PosError):
    """The atomic unit could not commit and was rolled back."""
    status_code = 500
