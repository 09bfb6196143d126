"""Entry point for running the cricket Messenger bot.

This module provides the main entry point for the bot.
It handles:
- Configuration loading (YAML file or environment)
- Logging setup with secret sanitization
- Dry-run validation and one-shot health checks
- Serving the webhook application with uvicorn
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from cricket_bot._version import __version__

if TYPE_CHECKING:
    from cricket_bot.config.schema import BotConfig

log = structlog.get_logger()


def setup_logging(
    debug: bool = False,
    log_format: str = "console",
    file_path: Path | None = None,
    file_enabled: bool = False,
) -> None:
    """Configure structured logging with secret sanitization.

    Args:
        debug: Enable debug logging if True
        log_format: Output format ("json" or "console")
        file_path: Path to log file (if file logging enabled)
        file_enabled: Whether to enable file logging
    """
    from cricket_bot.utils.logging import LogFormat, LogLevel, configure_logging

    level = LogLevel.DEBUG if debug else LogLevel.INFO
    fmt = LogFormat(log_format.lower()) if isinstance(log_format, str) else log_format

    configure_logging(
        level=level,
        log_format=fmt,
        file_path=file_path,
        file_enabled=file_enabled,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Argument list. Defaults to ``sys.argv[1:]``.

    Returns:
        Parsed argument namespace
    """
    parser = argparse.ArgumentParser(
        prog="cricket-bot",
        description="Cricket Messenger bot - news, explainers and jokes over Messenger",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: read from environment)",
    )

    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Parse config and validate without starting the server",
    )

    parser.add_argument(
        "--format",
        choices=["json", "console"],
        default="console",
        help="Log output format until the configuration is loaded (default: console)",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run health check and exit",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Bind address (overrides server.host)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (overrides server.port)",
    )

    return parser.parse_args(argv)


async def run_health_check(config: BotConfig) -> int:
    """Run all health checks once against live dependencies.

    Returns:
        0 if healthy, 1 otherwise
    """
    from cricket_bot.adapters.content.publication_api import PublicationAPIAdapter
    from cricket_bot.utils.health import HealthChecker

    content = PublicationAPIAdapter(config.content)
    try:
        result = await HealthChecker(config, content=content).run_all_checks()
    finally:
        await content.close()

    if result.healthy:
        log.info("health_check_passed", status=result.status.value, details=result.details)
        return 0

    log.error("health_check_failed", checks=result.to_dict()["checks"])
    return 1


def run_bot(args: argparse.Namespace) -> int:
    """Run the cricket bot.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    source = str(args.config) if args.config else "environment"
    log.info("starting_cricket_bot", version=__version__, config_source=source)

    try:
        from cricket_bot.config.loader import load_config

        config = load_config(args.config)
        log.info("configuration_loaded")
    except FileNotFoundError as e:
        log.error("configuration_file_not_found", path=source, error=str(e))
        return 1
    except ValueError as e:
        log.error("configuration_invalid", error=str(e))
        return 1

    from cricket_bot.utils.logging import configure_logging, install_redactor

    install_redactor(
        [
            config.messenger.app_secret,
            config.messenger.validation_token,
            config.messenger.page_access_token,
        ]
    )
    configure_logging(
        level="DEBUG" if args.debug else config.logging.level,
        log_format=config.logging.format,
        file_path=config.logging.file.path if config.logging.file.enabled else None,
        file_enabled=config.logging.file.enabled,
    )

    if args.dry_run:
        log.info("dry_run_mode_config_valid")
        return 0

    if args.health_check:
        return asyncio.run(run_health_check(config))

    import uvicorn

    from cricket_bot.web.app import create_app

    host = args.host or config.server.host
    port = args.port or config.server.port

    log.info("serving_webhook", host=host, port=port)
    uvicorn.run(
        create_app(config),
        host=host,
        port=port,
        log_config=None,
        timeout_graceful_shutdown=int(config.server.shutdown_grace_period) + 1,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    setup_logging(
        debug=args.debug,
        log_format=args.format,
    )

    try:
        return run_bot(args)
    except KeyboardInterrupt:
        log.info("shutting_down_gracefully")
        return 0


if __name__ == "__main__":
    sys.exit(main())
