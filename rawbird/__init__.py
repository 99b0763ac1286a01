"""Send a single OAuth 1.0a signed request to the Twitter API and print the raw response."""

from .errors import ConfigurationError, HttpError, NetworkError, RawbirdError

__all__ = ["ConfigurationError", "HttpError", "NetworkError", "RawbirdError"]
