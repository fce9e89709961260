import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger

from .config import settings

SERVICE_NAME = "n7-runbook"

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"
_BLUE = "\033[94m"

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35;1m",
}

# Loggers that drown out operator activity at INFO
_NOISY_LOGGERS = ("asyncio", "sqlalchemy.engine", "httpx", "httpcore")


def _paint(text: str, *codes: str, enabled: bool = True) -> str:
    if not enabled or not codes:
        return text
    return f"{''.join(codes)}{text}{_RESET}"


class ConsoleFormatter(logging.Formatter):
    """
    Operator console lines.

      [2026-10-19 12:00:00.000]  [RUNBOOK]  [INFO    ]  n7-runbook.status-store (rotate-keys)  » Step rotate-keys -> completed

    Records logged with extra={"step_id": ...} carry the step in parentheses
    after the logger name.
    """

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created, tz=timezone.utc).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        level = record.levelname

        origin = record.name
        step_id = getattr(record, "step_id", None)
        if step_id:
            origin = f"{origin} ({step_id})"

        parts = [
            _paint(f"[{ts}]", _DIM, enabled=self.use_color),
            _paint("[RUNBOOK]", _BLUE, _BOLD, enabled=self.use_color),
            _paint(f"[{level:<8}]", _LEVEL_COLORS.get(level, ""), _BOLD, enabled=self.use_color),
            _paint(origin, _DIM, enabled=self.use_color),
        ]

        msg = record.getMessage()
        if record.exc_info:
            msg = f"{msg}\n{self.formatException(record.exc_info)}"
        return "  ".join(parts) + f"  » {msg}"


class RunbookJsonFormatter(jsonlogger.JsonFormatter):
    """JSON lines for log aggregators, tagged with service and environment."""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("service", SERVICE_NAME)
        log_record.setdefault("environment", settings.ENVIRONMENT)


def build_handler(stream: Optional[TextIO] = None) -> logging.Handler:
    stream = stream or sys.stdout
    handler = logging.StreamHandler(stream)
    if settings.ENVIRONMENT == "production":
        handler.setFormatter(RunbookJsonFormatter(
            "%(asctime)s %(levelname)s %(name)s %(message)s",
            json_ensure_ascii=False,
        ))
    else:
        handler.setFormatter(ConsoleFormatter(use_color=stream.isatty()))
    return handler


def setup_logging(stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Install a single stdout handler on the root logger.

    Production writes JSON lines, every other environment writes console
    lines (colored only on a terminal). Level comes from settings.LOG_LEVEL.
    """
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)

    root.addHandler(build_handler(stream))
    root.setLevel(settings.LOG_LEVEL)

    logging.getLogger("uvicorn.access").disabled = True
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


logger = setup_logging()
