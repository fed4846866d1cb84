# route_failover/exceptions.py
"""
Custom exceptions for route-failover.

All public exceptions inherit from RouterError so callers can catch the
whole family with a single except clause. Each terminal error carries the
HTTP status and public error text the server responds with.
"""

from __future__ import annotations

from typing import Any

from .constants import (
    ERROR_ALL_FAILED,
    ERROR_MESSAGE_REQUIRED,
    ERROR_NO_KEYS,
    ERROR_NO_MODELS,
    ERROR_STORE_UNAVAILABLE,
)


class RouterError(Exception):
    """Base exception for all router errors."""

    status_code: int = 500
    public_error: str = "Internal server error"

    def to_payload(self) -> dict[str, Any]:
        """JSON body returned to the inbound caller."""
        return {"error": self.public_error}


class InvalidRequest(RouterError):
    """Raised when the inbound message is missing, empty or not a string."""

    status_code = 400
    public_error = ERROR_MESSAGE_REQUIRED


class NoCredentialsConfigured(RouterError):
    """Raised when the registry holds no active credentials."""

    status_code = 503
    public_error = ERROR_NO_KEYS


class NoModelsConfigured(RouterError):
    """Raised when the registry holds no active models."""

    status_code = 503
    public_error = ERROR_NO_MODELS


class StoreUnavailable(RouterError):
    """Raised when the registry's backing store cannot be reached."""

    status_code = 503
    public_error = ERROR_STORE_UNAVAILABLE


class UpstreamAttemptFailed(RouterError):
    """
    Raised *internally* by an upstream adapter when a single attempt fails.

    Covers non-2xx status, transport errors, timeouts and malformed success
    bodies. This exception is never surfaced to the caller — the router
    folds it into its last-error string and moves on to the next pair.

    Attributes
    ----------
    detail:
        Human-readable description of what went wrong.
    status:
        Upstream HTTP status, or None for transport/parse failures.
    """

    status_code = 502

    def __init__(self, detail: str, status: int | None = None) -> None:
        self.detail = detail
        self.status = status
        super().__init__(detail)


class AllAttemptsFailed(RouterError):
    """
    Raised when every (credential, model) pair has been tried and failed.

    Attributes
    ----------
    last_error:
        Description of the most recent failure only; earlier failures are
        not accumulated.
    attempts:
        Number of pairs that were attempted.
    """

    status_code = 502
    public_error = ERROR_ALL_FAILED

    def __init__(self, last_error: str | None, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"{ERROR_ALL_FAILED} after {attempts} attempt(s): {last_error}")

    def to_payload(self) -> dict[str, Any]:
        return {"error": self.public_error, "last_error": self.last_error}


class InternalFault(RouterError):
    """Wraps any unclassified failure; the message is returned verbatim."""

    status_code = 500

    def __init__(self, message: str) -> None:
        self.public_error = message or "Internal server error"
        super().__init__(self.public_error)
