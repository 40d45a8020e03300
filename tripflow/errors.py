"""Error taxonomy shared by repositories, services and routes."""
from __future__ import annotations


class TripFlowError(Exception):
    """Base class for failures surfaced to callers as a message."""

    status_code = 400
    default_message = "The request could not be completed."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "type": type(self).__name__}


class ValidationError(TripFlowError):
    """Bad input or a workflow guard that does not hold."""


class NotFoundError(ValidationError):
    status_code = 404
    default_message = "Record not found."


class AuthorizationError(TripFlowError):
    """The acting role or plan is not allowed to do this."""

    status_code = 403
    default_message = "Insufficient permissions."


class ConflictError(TripFlowError):
    """The record changed underneath the caller."""

    status_code = 409
    default_message = "The record was changed by someone else. Reload and try again."


class DataAccessError(TripFlowError):
    """The store is unreachable or rejected the query."""

    status_code = 503
    default_message = "Could not reach the data store. Please try again in a moment."
