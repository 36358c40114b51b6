"""CLI entrypoint for the MCP worker daemon."""

from __future__ import annotations

import argparse
import asyncio
import logging

from mcp_worker.config.logging import configure_logging
from mcp_worker.config.settings import LOG_LEVELS, AppSettings, settings
from mcp_worker.worker.broker import BrokerConnectionError, RedisBrokerClient
from mcp_worker.worker.handlers import TaskExecutor
from mcp_worker.worker.worker import McpWorker

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create CLI parser for worker runtime options."""

    parser = argparse.ArgumentParser(prog="mcp-worker")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Process at most one queue item and exit.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Override MCP_WORKER_LOG_LEVEL.",
    )
    return parser


async def _run(args: argparse.Namespace, app_settings: AppSettings) -> None:
    worker_settings = app_settings.worker
    configure_logging(
        level=args.log_level or worker_settings.log_level,
        log_file=worker_settings.log_file,
        structured=worker_settings.structured_logs,
    )
    logger.info("--- MCP-WORKER START ---")

    broker = RedisBrokerClient.from_settings(app_settings.redis)
    try:
        try:
            await broker.connect()
        except BrokerConnectionError as exc:
            logger.critical("FATAL: %s (%s)", exc, app_settings.redis.url)
            raise
        logger.info("Connected to Redis at %s", app_settings.redis.url)

        worker = McpWorker(
            config=worker_settings,
            broker=broker,
            executor=TaskExecutor(docker_binary=worker_settings.docker_binary),
        )
        if args.once:
            await worker.run_once()
        else:
            await worker.run_forever()
    finally:
        await broker.aclose()


def main(argv: list[str] | None = None) -> int:
    """Entry point for `mcp-worker`."""

    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        asyncio.run(_run(args, settings))
    except KeyboardInterrupt:
        return 130
    except Exception as exc:
        parser.exit(status=1, message=f"mcp-worker failed: {exc}\n")
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
