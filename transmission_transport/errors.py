"""Client error types for Transmission RPC interactions."""

from __future__ import annotations


class TransmissionClientError(Exception):
    """Base error for Transmission RPC client failures."""

    def __init__(
        self,
        message: str,
        *,
        method: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.status = status


class TransmissionConnectionError(TransmissionClientError):
    """Network connection to the daemon failed."""


class TransmissionTimeout(TransmissionConnectionError):
    """Timeout while communicating with the daemon."""


class TransmissionAuthRetriesExhausted(TransmissionClientError):
    """Daemon kept answering 409 Conflict for every attempt."""

    def __init__(self, method: str, attempts: int) -> None:
        super().__init__(
            f"Failed after {attempts} attempts to negotiate a session id",
            method=method,
            status=409,
        )
        self.attempts = attempts


class TransmissionMalformedResponse(TransmissionClientError):
    """Response body did not match the RPC envelope."""


class TransmissionAuthenticationError(TransmissionMalformedResponse):
    """Non-envelope 401/403 reply: the daemon rejected the HTTP credentials."""
