"""The logging configuration module."""

import json
import logging
import sys
from datetime import datetime
from typing import Optional

_RESERVED_RECORD_KEYS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "custom_dimensions",
        "exc_info",
        "exc_text",
        "stack_info",
    }
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging.

    Every record becomes one JSON object; custom dimensions bound through
    ``ContextualLogger.with_context`` are emitted under ``custom_dimensions``.
    """

    def _get_module_path(self, record: logging.LogRecord) -> str:
        """Resolve the dotted module path (e.g. ``memberhub.core.invitation_service``)."""
        parts = record.pathname.replace("\\", "/").split("/")
        if "memberhub" not in parts:
            return record.module

        start_idx = len(parts) - 1 - parts[::-1].index("memberhub")
        module_parts = parts[start_idx:]
        if module_parts[-1].endswith(".py"):
            module_parts[-1] = module_parts[-1][:-3]
        return ".".join(module_parts)

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record as JSON.

        Args:
        ----
            record (logging.LogRecord): The log record to format

        Returns:
        -------
            str: JSON-formatted log message

        """
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": self._get_module_path(record),
            "function": record.funcName,
            "line": record.lineno,
        }

        custom_dimensions = getattr(record, "custom_dimensions", None)
        if custom_dimensions:
            log_entry["custom_dimensions"] = custom_dimensions

        for key, value in record.__dict__.items():
            if key in _RESERVED_RECORD_KEYS:
                continue
            try:
                json.dumps(value)
                log_entry[key] = value
            except (TypeError, ValueError):
                log_entry[key] = str(value)

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


class ContextualLogger(logging.LoggerAdapter):
    """A LoggerAdapter that supports both custom dimensions and prefixes."""

    def __init__(
        self,
        logger: logging.Logger,
        prefix: str = "",
        dimensions: Optional[dict] = None,
    ) -> None:
        """Initialize the contextual logger.

        Args:
        ----
            logger (logging.Logger): Base logger instance
            prefix (str): Optional prefix for log messages
            dimensions (Optional[dict]): Custom dimensions for structured logging

        """
        super().__init__(logger, {})
        self.prefix = prefix
        self.dimensions = dimensions or {}

    def process(self, msg: str, kwargs: dict) -> tuple[str, dict]:
        """Prefix the message and merge the bound dimensions into ``extra``."""
        if self.prefix:
            msg = f"{self.prefix}{msg}"

        extra = kwargs.setdefault("extra", {})
        if self.dimensions:
            extra["custom_dimensions"] = {
                **extra.get("custom_dimensions", {}),
                **self.dimensions,
            }

        return msg, kwargs

    def with_context(self, **dimensions: str | int | float | bool | None) -> "ContextualLogger":
        """Create a new logger with additional context dimensions.

        Args:
        ----
            dimensions: Keyword arguments to add to dimensions

        Returns:
        -------
            ContextualLogger: New logger instance with updated dimensions

        """
        return ContextualLogger(self.logger, self.prefix, {**self.dimensions, **dimensions})


class LoggerConfigurator:
    """Configures loggers with support for dimensions and prefixes.

    The API context dependency binds ``request_id`` and ``user_id``; services add
    their own dimensions on top, for example ``operation="accept_invitation"`` or
    ``security_event="email_decryption_failure"``.

    Uses settings from memberhub.core.config: text format when LOCAL_DEVELOPMENT=True,
    JSON otherwise, at LOG_LEVEL.

    Example:
    -------
    ```python
    logger = LoggerConfigurator.configure_logger(__name__, dimensions={"component": "invites"})
    logger.with_context(organization_id=1).info("Invitation created")
    ```

    """

    @staticmethod
    def configure_logger(
        name: str,
        prefix: str = "",
        dimensions: Optional[dict] = None,
    ) -> ContextualLogger:
        """Configure and return a logger with the given name and initial context.

        Args:
        ----
            name (str): Logger name (typically __name__)
            prefix (str): Initial prefix for log messages
            dimensions (Optional[dict]): Initial custom dimensions

        Returns:
        -------
            ContextualLogger: Configured logger with context support

        """
        logger = logging.getLogger(name)

        # Import settings here to avoid circular imports
        from memberhub.core.config import settings

        logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        logger.propagate = False

        if getattr(logger, "_memberhub_configured", False):
            return ContextualLogger(logger, prefix, dimensions)

        logger.handlers.clear()
        stream_handler = logging.StreamHandler(sys.stdout)
        if settings.LOCAL_DEVELOPMENT:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        else:
            formatter = JSONFormatter()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

        logger._memberhub_configured = True

        return ContextualLogger(logger, prefix, dimensions)


# Default logger instance
logger = LoggerConfigurator.configure_logger(__name__)
