"""
OAuth 1.0a request signing (HMAC-SHA1), following RFC 5849 section 3.4.

Every call to `sign` draws a fresh nonce and timestamp. A nonce and
timestamp can be pinned through keyword arguments, which is only meant for
reproducing published signature examples in tests.
"""

from __future__ import annotations

import logging
import secrets
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from oauthlib.oauth1 import Client
from oauthlib.oauth1.rfc5849 import signature as oauth_signature
from oauthlib.oauth1.rfc5849 import utils as oauth_utils

from .config import Credentials
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"
OAUTH_PARAMETER_NAMES = (
    "oauth_consumer_key",
    "oauth_nonce",
    "oauth_signature_method",
    "oauth_timestamp",
    "oauth_token",
    "oauth_version",
)
RESERVED_PARAMETERS = frozenset(OAUTH_PARAMETER_NAMES + ("oauth_signature",))


def percent_encode(value: str) -> str:
    """
    Percent-encode a string per RFC 3986.

    Only unreserved characters (ALPHA, DIGIT, "-", ".", "_", "~") are left
    as-is; everything else is UTF-8 encoded with uppercase hex, so a space is
    always "%20" and never "+".
    """
    try:
        return oauth_utils.escape(value)
    except ValueError as e:
        raise ConfigurationError(f"Cannot encode {value!r}: {e}") from e


def generate_nonce() -> str:
    """64 hex characters (32 random bytes)."""
    return secrets.token_hex(32)


def generate_timestamp() -> str:
    return str(int(time.time()))


@dataclass(frozen=True)
class SignatureContext:
    """Everything that goes into one signature. Built once per request, never reused."""

    method: str
    base_url: str
    parameters: Mapping[str, str]
    nonce: str
    timestamp: str

    @classmethod
    def create(
        cls,
        method: str,
        base_url: str,
        parameters: Mapping[str, str],
        credentials: Credentials,
        *,
        nonce: str | None = None,
        timestamp: str | None = None,
    ) -> SignatureContext:
        collisions = sorted(RESERVED_PARAMETERS.intersection(parameters))
        if collisions:
            raise ConfigurationError(
                f"Request parameters must not override OAuth parameters: {', '.join(collisions)}"
            )

        nonce = nonce or generate_nonce()
        timestamp = timestamp or generate_timestamp()
        merged = dict(parameters)
        merged.update(
            {
                "oauth_consumer_key": credentials.consumer_key,
                "oauth_nonce": nonce,
                "oauth_signature_method": SIGNATURE_METHOD,
                "oauth_timestamp": timestamp,
                "oauth_token": credentials.access_token,
                "oauth_version": OAUTH_VERSION,
            }
        )
        return cls(
            method=method.upper(),
            base_url=base_url,
            parameters=MappingProxyType(merged),
            nonce=nonce,
            timestamp=timestamp,
        )

    def oauth_parameters(self) -> dict[str, str]:
        return {name: self.parameters[name] for name in OAUTH_PARAMETER_NAMES}


@dataclass(frozen=True)
class SignatureResult:
    authorization: str
    oauth_params: Mapping[str, str]
    base_string: str


def normalize_parameters(parameters: Mapping[str, str]) -> str:
    """Encode, sort by encoded key then encoded value, and join as k=v&k=v."""
    try:
        return oauth_signature.normalize_parameters(list(parameters.items()))
    except ValueError as e:
        raise ConfigurationError(f"Cannot encode request parameters: {e}") from e


def signature_base_string(method: str, base_url: str, parameters: Mapping[str, str]) -> str:
    try:
        base_uri = oauth_signature.base_string_uri(base_url)
    except ValueError as e:
        raise ConfigurationError(f"Invalid base URL {base_url!r}: {e}") from e
    return oauth_signature.signature_base_string(method.upper(), base_uri, normalize_parameters(parameters))


def signing_key(consumer_secret: str, token_secret: str) -> str:
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"


def hmac_sha1_signature(base_string: str, credentials: Credentials) -> str:
    # validates both secrets so encoding failures surface as ConfigurationError
    signing_key(credentials.consumer_secret, credentials.access_token_secret)
    client = Client(
        credentials.consumer_key,
        client_secret=credentials.consumer_secret,
        resource_owner_key=credentials.access_token,
        resource_owner_secret=credentials.access_token_secret,
    )
    return oauth_signature.sign_hmac_sha1_with_client(base_string, client)


def authorization_header(oauth_params: Mapping[str, str]) -> str:
    return "OAuth " + ", ".join(
        f'{percent_encode(key)}="{percent_encode(value)}"' for key, value in sorted(oauth_params.items())
    )


def sign(
    method: str,
    base_url: str,
    parameters: Mapping[str, str],
    credentials: Credentials,
    *,
    nonce: str | None = None,
    timestamp: str | None = None,
) -> SignatureResult:
    """
    Sign a request with OAuth 1.0a HMAC-SHA1.

    Args:
        method: HTTP method (GET, POST, PUT or DELETE)
        base_url: Resource URL without query string
        parameters: Every query or form parameter sent with the request
        credentials: Consumer and access token credentials

    Returns:
        SignatureResult with the Authorization header value and the OAuth
        parameters (oauth_signature included)
    """
    context = SignatureContext.create(
        method, base_url, parameters, credentials, nonce=nonce, timestamp=timestamp
    )
    base_string = signature_base_string(context.method, context.base_url, context.parameters)

    oauth_params = context.oauth_parameters()
    logger.debug("Signature base string: %s", base_string)
    for name, value in sorted(oauth_params.items()):
        logger.debug("%s: %s", name, value)

    oauth_params["oauth_signature"] = hmac_sha1_signature(base_string, credentials)
    return SignatureResult(
        authorization=authorization_header(oauth_params),
        oauth_params=MappingProxyType(dict(sorted(oauth_params.items()))),
        base_string=base_string,
    )
