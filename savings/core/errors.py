"""Error taxonomy shared by the sync pipeline, quote gateway and API layer."""

from typing import Any


class SavingsError(Exception):
    """Base error rendered by the API as ``{"error": message, "details": ...}``."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class UnauthorizedError(SavingsError):
    status_code = 401


class BadRequestError(SavingsError):
    status_code = 400


class StorageError(SavingsError):
    """Database failure during a sync; the whole batch has been rolled back."""

    status_code = 500


class RateLimitedError(SavingsError):
    status_code = 429


class UpstreamUnavailableError(SavingsError):
    """A quote provider failed. Caught inside the quote gateway, never surfaced to readers."""

    status_code = 502
