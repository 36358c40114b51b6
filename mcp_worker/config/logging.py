import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

PLAIN_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class JsonLineFormatter(logging.Formatter):
    """One JSON object per record so the worker log can be tailed by machines."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(
    level: str = "INFO",
    log_file: Optional[str] = None,
    structured: bool = False,
) -> None:
    """
    Route worker logs to stdout and, when ``log_file`` is set, append them to
    that file as well. The file is opened once here and shared by all loggers.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Path of the append-only log file, or None for stdout only
        structured: Emit JSON lines instead of the plain text format
    """
    formatter: logging.Formatter = (
        JsonLineFormatter() if structured else logging.Formatter(PLAIN_FORMAT)
    )

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True,  # Override any existing configuration
    )
    logging.getLogger("redis").setLevel(logging.WARNING)

    logging.getLogger(__name__).info("Logging configured with level: %s", level)
