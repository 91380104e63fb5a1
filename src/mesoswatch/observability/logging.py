"""Structured logging for mesoswatch runs.

Provides:
- JSON-formatted logs for log aggregation when running under an orchestrator
- Human-readable console logs for interactive use
- Watch context (agent IP, queried endpoint) propagated into every record

Usage:
    from mesoswatch.observability.logging import LogContext, configure_logging

    configure_logging(json_format=False, level="INFO")

    with LogContext(agent_ip="172.31.34.94", endpoint="http://10.0.0.2:5050/state"):
        logger.info("Waiting for agent")  # Includes agent_ip and endpoint
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

# Context variables for the current watch
agent_ip_var: contextvars.ContextVar[str] = contextvars.ContextVar("agent_ip", default="")
endpoint_var: contextvars.ContextVar[str] = contextvars.ContextVar("endpoint", default="")

_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON log formatter carrying the watch context.

    Output format:
    {
        "timestamp": "2026-01-10T12:34:56.789Z",
        "level": "INFO",
        "logger": "mesoswatch.cluster.querier",
        "message": "Querying mesos endpoint @ http://10.0.0.2:5050/state",
        "module": "querier",
        "function": "fetch",
        "line": 42,
        "agent_ip": "172.31.34.94",
        "endpoint": "http://10.0.0.5:5050/state"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        agent_ip = agent_ip_var.get()
        if agent_ip:
            log_data["agent_ip"] = agent_ip

        endpoint = endpoint_var.get()
        if endpoint:
            log_data["endpoint"] = endpoint

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        # Extra fields passed through `extra=`
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_data[key] = value
                except (TypeError, ValueError):
                    log_data[key] = str(value)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for interactive runs.

    Output format:
    2026-01-10 12:34:56 | INFO     | mesoswatch.watch.loop | Agent not registered yet | agent=172.31.34.94
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = f"{record.levelname:8}"

        if self.use_colors:
            color = self.COLORS.get(record.levelname, "")
            level = f"{color}{level}{self.RESET}"

        message = record.getMessage()

        agent_ip = agent_ip_var.get()
        context = f" | agent={agent_ip}" if agent_ip else ""

        result = f"{timestamp} | {level} | {record.name} | {message}{context}"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def configure_logging(
    json_format: bool = False,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Configure process-wide logging.

    Args:
        json_format: Use JSON format (for log collectors)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_colors: Use ANSI colors in console format
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))

    root_logger.addHandler(handler)

    # Request lines are logged by the querier itself
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


class LogContext:
    """Context manager for binding the watch context to log records.

    Usage:
        with LogContext(agent_ip="172.31.34.94"):
            logger.info("Polling")  # Includes agent_ip
    """

    def __init__(self, **kwargs: str) -> None:
        self.extra = kwargs
        self._tokens: dict[str, contextvars.Token[str]] = {}

    def __enter__(self) -> LogContext:
        if "agent_ip" in self.extra:
            self._tokens["agent_ip"] = agent_ip_var.set(self.extra["agent_ip"])
        if "endpoint" in self.extra:
            self._tokens["endpoint"] = endpoint_var.set(self.extra["endpoint"])
        return self

    def __exit__(self, *args: Any) -> None:
        for key, token in self._tokens.items():
            if key == "agent_ip":
                agent_ip_var.reset(token)
            elif key == "endpoint":
                endpoint_var.reset(token)
