from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")


def stringify_value(value: Any) -> str:
    """
    Convert a JSON template value to the string that gets sent and signed.

    Strings pass through, booleans become "true"/"false", integers are
    written in decimal and floats keep their Python repr ("1.5", "2.0").
    """
    if isinstance(value, str):
        return value
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    raise ConfigurationError(
        f"Unsupported parameter value {value!r}: only strings, numbers and booleans are allowed"
    )


@dataclass(frozen=True)
class RequestTemplate:
    endpoint: str
    method: str
    parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        method = self.method.strip().upper() if isinstance(self.method, str) else ""
        if method not in SUPPORTED_METHODS:
            raise ConfigurationError(
                f"Unsupported HTTP method {self.method!r}. Use one of: {', '.join(SUPPORTED_METHODS)}"
            )

        if not isinstance(self.endpoint, str):
            raise ConfigurationError("Template endpoint must be a string")
        endpoint = self.endpoint.strip().lstrip("/")
        if not endpoint:
            raise ConfigurationError("Template endpoint must not be empty")
        if endpoint.lower().startswith(("http://", "https://")):
            raise ConfigurationError(
                f"Template endpoint must be relative to the API prefix, got {self.endpoint!r}"
            )
        if "?" in endpoint or "#" in endpoint:
            raise ConfigurationError(
                f"Template endpoint must not contain a query string or fragment, got {self.endpoint!r}; "
                "put request values in parameters"
            )

        parameters = {}
        for key, value in dict(self.parameters).items():
            if not isinstance(key, str) or not key:
                raise ConfigurationError(f"Invalid parameter name {key!r}")
            parameters[key] = stringify_value(value)

        object.__setattr__(self, "method", method)
        object.__setattr__(self, "endpoint", endpoint)
        object.__setattr__(self, "parameters", MappingProxyType(parameters))

    def with_overrides(self, overrides: Mapping[str, str]) -> RequestTemplate:
        """Return a copy whose parameters are updated with `overrides`."""
        if not overrides:
            return self
        merged = dict(self.parameters)
        merged.update(overrides)
        return RequestTemplate(endpoint=self.endpoint, method=self.method, parameters=merged)


def parse_template(data: Any) -> RequestTemplate:
    if not isinstance(data, dict):
        raise ConfigurationError("Template must be a JSON object")

    missing = [key for key in ("endpoint", "method") if key not in data]
    if missing:
        raise ConfigurationError(f"Template is missing required fields: {', '.join(missing)}")

    parameters = data.get("parameters")
    if parameters is None:
        parameters = {}
    if not isinstance(parameters, dict):
        raise ConfigurationError("Template parameters must be a JSON object")

    return RequestTemplate(
        endpoint=data["endpoint"],
        method=data["method"],
        parameters=parameters,
    )


def load_template(path: str) -> RequestTemplate:
    """Load and validate a request template file (*.json)."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Failed to read template file {path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Failed to parse template file {path}: {e}") from e

    template = parse_template(data)
    logger.debug("Loaded template %s: %s %s", path, template.method, template.endpoint)
    return template


def parse_overrides(items: Iterable[str]) -> dict[str, str]:
    """
    Parse `key=value` parameter overrides.

    Only the first "=" separates key from value. Items without a key are
    skipped with a warning.
    """
    overrides: dict[str, str] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key:
            logger.warning("Invalid parameter override %r detected, skipping...", item)
            continue
        overrides[key] = value
    return overrides
