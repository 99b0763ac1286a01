import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional
from urllib.parse import quote, urlencode

import requests

from .config import Credentials
from .errors import HttpError, NetworkError
from .signer import sign
from .template import RequestTemplate

logger = logging.getLogger(__name__)

API_PREFIX = "https://api.twitter.com/1.1/"
DEFAULT_TIMEOUT = (10.0, 30.0)
QUERY_METHODS = ("GET", "DELETE")
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class SignedRequest:
    method: str
    url: str
    headers: Mapping[str, str]
    body: Optional[str] = None


@dataclass(frozen=True)
class RawResponse:
    status: int
    body: str
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status < 400

    def raise_for_status(self) -> None:
        if not self.ok:
            raise HttpError(self.status, self.body, self.reason)


def resolve_url(endpoint: str) -> str:
    """Full resource URL, percent-encoded the way requests will send it."""
    return requests.utils.requote_uri(API_PREFIX + endpoint.lstrip("/"))


def encode_query(parameters: Mapping[str, str]) -> str:
    """Standard query string encoding (space as "+")."""
    return urlencode(sorted(parameters.items()))


def encode_form(parameters: Mapping[str, str]) -> str:
    """Form body encoding with RFC 3986 escapes (space as "%20")."""
    return urlencode(sorted(parameters.items()), safe="~", quote_via=quote)


def build_request(template: RequestTemplate, credentials: Credentials) -> SignedRequest:
    """
    Build the signed request for a template.

    GET and DELETE carry the parameters in the query string; POST and PUT send
    them as a form-encoded body. Either way the same parameters are signed.
    """
    base_url = resolve_url(template.endpoint)
    parameters = dict(template.parameters)
    signature = sign(template.method, base_url, parameters, credentials)

    headers = {"Authorization": signature.authorization}
    url = base_url
    body = None
    if template.method in QUERY_METHODS:
        if parameters:
            url = f"{base_url}?{encode_query(parameters)}"
    else:
        headers["Content-Type"] = FORM_CONTENT_TYPE
        body = encode_form(parameters)

    logger.debug("General parameters")
    for key, value in sorted(parameters.items()):
        logger.debug("%s: %s", key, value)

    return SignedRequest(
        method=template.method,
        url=url,
        headers=MappingProxyType(headers),
        body=body,
    )


def send(
    template: RequestTemplate,
    credentials: Credentials,
    timeout: float | tuple[float, float] = DEFAULT_TIMEOUT,
) -> RawResponse:
    """
    Sign and send the request described by `template`.

    Returns the status and body text for every HTTP response, 4xx and 5xx
    included. Only transport failures raise (as NetworkError).
    """
    request = build_request(template, credentials)
    logger.info("Sending %s %s", request.method, request.url)

    with requests.Session() as session:
        try:
            response = session.request(
                method=request.method,
                url=request.url,
                data=request.body,
                headers=dict(request.headers),
                timeout=timeout,
            )
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Request to {request.url} timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request to {request.url} failed: {e}") from e

        body = response.text

    logger.info("Received HTTP %d %s", response.status_code, response.reason)
    return RawResponse(status=response.status_code, body=body, reason=response.reason or "")
