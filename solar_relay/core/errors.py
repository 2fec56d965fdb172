from __future__ import annotations


class SolarRelayError(Exception):
    """Base class for errors raised by the telemetry pipeline."""


class Unauthorized(SolarRelayError):
    def __init__(self, message: str = "Authorization header missing") -> None:
        super().__init__(message)
        self.message = message


class BadRequest(SolarRelayError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UpstreamError(SolarRelayError):
    """The telemetry API answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
