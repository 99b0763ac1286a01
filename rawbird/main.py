import argparse
import logging
import os
import sys

from .config import (
    LOG_LEVEL_ENV_VAR,
    load_credentials,
    load_env_file,
    load_timeout,
    parse_timeout,
    show_credentials,
)
from .dispatcher import DEFAULT_TIMEOUT, send
from .errors import ConfigurationError, HttpError, NetworkError
from .template import load_template, parse_overrides

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIGURATION_ERROR = 1
EXIT_NETWORK_ERROR = 3
EXIT_HTTP_ERROR = 4


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level_name = (os.getenv(LOG_LEVEL_ENV_VAR) or "WARNING").strip().upper()
        level = getattr(logging, level_name, None)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rawbird",
        description="Send a raw OAuth 1.0a signed request to the Twitter API and print the response",
    )
    parser.add_argument("template_file", nargs="?", help="Request template file (*.json)")
    parser.add_argument(
        "-p",
        "--param",
        dest="parameters",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Override a parameter from the template file (repeatable)",
    )
    parser.add_argument("--env-file", dest="env_file", type=str, help="Path to a .env file with credentials")
    parser.add_argument("--timeout", type=str, help="Connect and read timeout in seconds")
    parser.add_argument(
        "--fail",
        action="store_true",
        help="Exit with a non-zero status when the server responds with 4xx/5xx",
    )
    parser.add_argument(
        "--show-config",
        dest="show_config",
        action="store_true",
        help="Show the loaded credentials (masked) and exit without sending",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase log verbosity")
    return parser


def run(args: argparse.Namespace) -> int:
    try:
        load_env_file(args.env_file)
        credentials = load_credentials()

        if args.show_config:
            show_credentials(credentials)
            return EXIT_OK

        timeout = parse_timeout(args.timeout) if args.timeout else load_timeout()
        template = load_template(args.template_file).with_overrides(parse_overrides(args.parameters))
        response = send(template, credentials, timeout=timeout or DEFAULT_TIMEOUT)
    except ConfigurationError as e:
        logger.debug("Configuration error", exc_info=True)
        print(f"❌ Configuration error: {e}", file=sys.stderr)
        return EXIT_CONFIGURATION_ERROR
    except NetworkError as e:
        logger.debug("Network error", exc_info=True)
        print(f"❌ Network error: {e}", file=sys.stderr)
        return EXIT_NETWORK_ERROR

    print(response.body)

    if args.fail:
        try:
            response.raise_for_status()
        except HttpError as e:
            print(f"❌ {e}", file=sys.stderr)
            return EXIT_HTTP_ERROR
    return EXIT_OK


def main() -> None:
    """Main CLI entry point"""
    parser = _build_parser()
    args = parser.parse_args()
    if not args.template_file and not args.show_config:
        parser.error("the following arguments are required: template_file")
    _configure_logging(args.verbose)
    exit_code = run(args)
    if exit_code:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
