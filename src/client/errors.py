"""Error family raised by the classification service client."""

from __future__ import annotations


class ClientError(Exception):
    """Base class for every failure surfaced by the client layer."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.detail = detail


class NetworkError(ClientError):
    """The service could not be reached (DNS, connect, timeout, reset)."""


class ValidationError(ClientError):
    """The input was rejected, either locally or by the service."""


class ServerError(ClientError):
    """The service answered with an unexpected non-2xx status."""


class ParseError(ServerError):
    """A response body could not be decoded into the expected schema."""


class SubmissionInProgressError(ClientError):
    """A submission was attempted while another one is still running."""
