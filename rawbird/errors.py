class RawbirdError(Exception):
    """Base class for every error raised by rawbird."""


class ConfigurationError(RawbirdError, ValueError):
    """Missing credentials, a malformed template, or a reserved parameter collision."""


class NetworkError(RawbirdError, RuntimeError):
    """The request could not be delivered (DNS, connection, TLS, timeout)."""


class HttpError(RawbirdError):
    """Raised on request only (see RawResponse.raise_for_status); non-2xx is normally just output."""

    def __init__(self, status: int, body: str, reason: str = "") -> None:
        self.status = status
        self.body = body
        self.reason = reason
        super().__init__(f"HTTP {status}: {reason}" if reason else f"HTTP {status}")
