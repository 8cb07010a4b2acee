import argparse
import asyncio
import signal
import sys
from typing import Optional, Sequence

import structlog

from core.exceptions.configuration_error import ConfigurationError
from infra.app import create_app
from infra.config.config import Config, get_config
from infra.config.loader import load_configuration
from infra.logging.config import configure_logging

logger = structlog.stdlib.get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_CONFIGURATION_ERROR = 2


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="griffin",
        description="Periodically probe backends and track their health.",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        default=config.CONFIG_PATH,
        help="Path to griffin config file (default: %(default)s)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")

    return parser


def install_signal_handlers(shutdown_event: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()

    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, shutdown_event.set)
        except NotImplementedError:
            # Windows event loops do not support signal handlers.
            signal.signal(signum, lambda *_: loop.call_soon_threadsafe(shutdown_event.set))


async def serve(app) -> None:
    shutdown_event = asyncio.Event()
    install_signal_handlers(shutdown_event)

    await app.run(shutdown_event)


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = get_config()

    configure_logging(
        log_level=config.LOGGING_CONFIG.LEVEL,
        json_logs=config.LOGGING_CONFIG.JSON_FORMAT,
        service_name=config.APP_NAME,
        environment=config.ENVIRONMENT,
        library_log_levels=config.LOGGING_CONFIG.LIBRARY_LOG_LEVELS,
    )

    args = build_parser(config).parse_args(argv)

    logger.info(f"Loading config from {args.config}")

    try:
        configuration = load_configuration(args.config)
    except ConfigurationError as e:
        logger.error(str(e))
        return EXIT_CONFIGURATION_ERROR

    app = create_app(configuration, config)
    asyncio.run(serve(app))

    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())
