"""structlog setup for the gateway. Output goes to stderr; stdout carries MCP."""

import contextvars
import logging
import os
import re
import sys
import uuid
from pathlib import Path
from typing import Optional

import structlog

# Set per tool call by the registry
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)


# Patterns that indicate sensitive values
_SENSITIVE_PATTERNS = [
    re.compile(r"shpat_[A-Za-z0-9]+"),       # Admin API access tokens
    re.compile(r"shpca_[A-Za-z0-9]+"),       # Custom app tokens
    re.compile(r"shppa_[A-Za-z0-9]+"),       # Private app passwords
]

_SENSITIVE_KEYS = {
    "access_token", "token", "secret", "password",
    "authorization", "x-shopify-access-token", "headers",
}


def _redact_value(value):
    if not isinstance(value, str):
        return value
    for pattern in _SENSITIVE_PATTERNS:
        value = pattern.sub("[REDACTED]", value)
    return value


def _redact_processor(logger, method_name, event_dict):
    for key in list(event_dict.keys()):
        if key.lower() in _SENSITIVE_KEYS:
            event_dict[key] = "[REDACTED]"
            continue
        if isinstance(event_dict[key], str):
            event_dict[key] = _redact_value(event_dict[key])
    return event_dict


def _correlation_id_processor(logger, method_name, event_dict):
    cid = correlation_id_var.get("")
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def new_correlation_id() -> str:
    """Generate a new correlation ID and set it in the current context.

    Called by the tool registry at the start of every tool call so that
    each GraphQL request log line can be tied back to the invocation.

    Returns:
        The generated correlation ID (8-char hex).
    """
    cid = uuid.uuid4().hex[:8]
    correlation_id_var.set(cid)
    return cid


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """Configure structlog JSON output, plus a plain-text file handler when
    ``log_file`` is set. Unknown levels raise ``ValueError``.
    """
    level_upper = level.upper()
    if level_upper not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        raise ValueError(f"Invalid logging level: {level}")

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=level_upper,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _correlation_id_processor,
            _redact_processor,
            structlog.processors.JSONRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level_upper)
        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        file_handler.setFormatter(formatter)

        # Owner read/write only
        os.chmod(log_file, 0o600)

        logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.typing.FilteringBoundLogger:
    """Return a lazy structlog logger bound to ``name``."""
    return structlog.get_logger(name)
