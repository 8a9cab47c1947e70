"""
Command-line entry point: start one run session and serve it.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import TYPE_CHECKING

from rundap.config import update_config
from rundap.session import start_run_session

if TYPE_CHECKING:
    from rundap.config import RunnerConfig

logger = logging.getLogger(__name__)

PORT_ANNOUNCEMENT = "RUNDAP_PORT"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


async def run_session(config: RunnerConfig) -> None:
    """Start a session, announce its port on stdout and serve it to the end."""
    session = await start_run_session(config)

    # The caller reads this line to learn where the front end should connect.
    print(f"{PORT_ANNOUNCEMENT}={session.port}", flush=True)
    await session.wait_closed()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rundap",
        description="Run a Java program without debugging over the Debug Adapter Protocol",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=0,
        help="TCP port to listen on (default: 0, an ephemeral port)",
    )
    parser.add_argument(
        "--java-home-env",
        type=str,
        default="JAVA_HOME",
        help="Environment variable naming the Java installation (default: JAVA_HOME)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=LOG_LEVELS,
        help="Log level (default: INFO)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for the launch bridge
    """
    args = build_parser().parse_args(argv)
    config = update_config(
        host=args.host,
        port=args.port,
        runtime_home_env=args.java_home_env,
        log_level=args.log_level,
    )

    # Log to stderr; stdout carries the port announcement.
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    try:
        asyncio.run(run_session(config))
    except KeyboardInterrupt:
        logger.info("Launch bridge stopped by user")
    except Exception:
        logger.exception("Error in launch bridge")
        sys.exit(1)


if __name__ == "__main__":
    main()
