import logging
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

CREDENTIAL_ENV_VARS = (
    "TWITTER_CK",
    "TWITTER_CS",
    "TWITTER_AT",
    "TWITTER_ATS",
)
TIMEOUT_ENV_VAR = "RAWBIRD_TIMEOUT"
LOG_LEVEL_ENV_VAR = "RAWBIRD_LOG"


@dataclass(frozen=True)
class Credentials:
    consumer_key: str
    consumer_secret: str = field(repr=False)
    access_token: str
    access_token_secret: str = field(repr=False)


def load_env_file(path: str | None = None) -> bool:
    """
    Load variables from a .env file into the process environment.

    Values already present in the environment win. When no path is given the
    file is searched for upward from the current working directory.
    Returns True if a file was found and loaded.
    """
    if path:
        if not os.path.isfile(path):
            raise ConfigurationError(f"Environment file not found: {path}")
        dotenv_path = path
    else:
        dotenv_path = find_dotenv(usecwd=True)
        if not dotenv_path:
            logger.debug("No .env file found")
            return False

    logger.debug("Loading environment from %s", dotenv_path)
    return load_dotenv(dotenv_path, override=False)


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Read the four OAuth 1.0a credentials from the environment."""
    if environ is None:
        environ = os.environ

    required_vars = [(name, (environ.get(name) or "").strip()) for name in CREDENTIAL_ENV_VARS]
    missing_vars = [var_name for var_name, var_value in required_vars if not var_value]

    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}. "
            "Please check your .env file and ensure all Twitter API credentials are set."
        )

    return Credentials(
        required_vars[0][1],  # TWITTER_CK
        required_vars[1][1],  # TWITTER_CS
        required_vars[2][1],  # TWITTER_AT
        required_vars[3][1],  # TWITTER_ATS
    )


def load_timeout(environ: Optional[Mapping[str, str]] = None) -> float | None:
    if environ is None:
        environ = os.environ
    raw = (environ.get(TIMEOUT_ENV_VAR) or "").strip()
    if not raw:
        return None
    return parse_timeout(raw, source=TIMEOUT_ENV_VAR)


def parse_timeout(raw: str, *, source: str = "--timeout") -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid timeout for {source}: {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"Timeout for {source} must be positive, got {raw!r}")
    return value


def _mask(value: str, visible: int = 0) -> str:
    if not value:
        return "Not set"
    if visible and len(value) > visible:
        return "*" * (len(value) - visible) + value[-visible:]
    return "*" * len(value)


def show_credentials(credentials: Credentials) -> None:
    """Show current credentials (without secrets)."""
    print("Current configuration:")
    print(f"  Consumer Key ({CREDENTIAL_ENV_VARS[0]}): {_mask(credentials.consumer_key, visible=4)}")
    print(f"  Consumer Secret ({CREDENTIAL_ENV_VARS[1]}): {_mask(credentials.consumer_secret)}")
    print(f"  Access Token ({CREDENTIAL_ENV_VARS[2]}): {_mask(credentials.access_token, visible=4)}")
    print(f"  Access Token Secret ({CREDENTIAL_ENV_VARS[3]}): {_mask(credentials.access_token_secret)}")
