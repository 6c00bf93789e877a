"""
Command-line entry point.

Usage:
    python -m homepage                          # 127.0.0.1:8080, 15s drain
    python -m homepage --graceful-timeout 1m    # wait up to a minute on Ctrl+C
    homepage-server --host 0.0.0.0 --port 9000
"""

import argparse
import sys
from typing import Optional, Sequence

from homepage.core.logging_config import get_logger
from homepage.core.config import Settings, parse_duration
from homepage.core.errors import TemplateLoadError
from homepage.core.lifecycle import run_server
from homepage.main import create_app

logger = get_logger(__name__)


def _duration(value: str) -> float:
    try:
        return parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="homepage-server", description="Serve the personal website")
    parser.add_argument(
        "--graceful-timeout",
        type=_duration,
        default=None,
        help="the duration for which the server gracefully waits for existing "
        "connections to finish - e.g. 15s or 1m",
    )
    parser.add_argument("--host", default=None, help="address to listen on")
    parser.add_argument("--port", type=int, default=None, help="port to listen on")
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay command-line flags on environment settings."""
    base = base or Settings()
    overrides = {}
    if args.graceful_timeout is not None:
        overrides["GRACEFUL_TIMEOUT"] = args.graceful_timeout
    if args.host is not None:
        overrides["HOST"] = args.host
    if args.port is not None:
        overrides["PORT"] = args.port
    return base.model_copy(update=overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:

    args = build_parser().parse_args(argv)
    settings = settings_from_args(args)

    try:
        app = create_app(settings)
    except TemplateLoadError as e:
        logger.critical("Cannot start without blog template", error=e.message)
        return 1

    return run_server(app, settings)


if __name__ == "__main__":
    sys.exit(main())
