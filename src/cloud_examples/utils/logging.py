import json
import logging
import os
import sys
from typing import Any, Dict

import structlog

JSON_SERIALIZER = json.dumps


def _get_log_level(level_str: str) -> int:
    """Convert log level string to integer with validation"""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARN": logging.WARNING,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    level = level_map.get(level_str.upper())
    if level is None:
        try:
            level = int(level_str)
            if level not in [10, 20, 30, 40, 50]:
                raise ValueError
        except (ValueError, TypeError):
            level = logging.INFO

    return level


def _add_exception_context(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add exception type and message to exception logs"""
    if 'exc_info' in event_dict and event_dict['exc_info']:
        exc_info = event_dict['exc_info']
        if isinstance(exc_info, BaseException):
            exc_info = (type(exc_info), exc_info, exc_info.__traceback__)
        if isinstance(exc_info, tuple):
            exc_type, exc_value, _ = exc_info
            if exc_type and exc_value:
                event_dict['exception_type'] = exc_type.__name__
                event_dict['exception_message'] = str(exc_value)

                # Correlate with the job run when the logger carries one
                if hasattr(logger, '_context') and logger._context:
                    job_run_id = logger._context.get('job_run_id')
                    if job_run_id:
                        event_dict['correlation_id'] = job_run_id

    return event_dict


def _truncate_long_values(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Truncate very long field values to keep logs readable"""
    max_length = 200

    # Success data dumps are multi-line; keep only the first lines
    for key in ("metrics", "diagnostics", "files"):
        value = event_dict.get(key)
        if isinstance(value, str) and value.count("\n") > 20:
            lines = value.splitlines()
            event_dict[key] = "\n".join(lines[:20] + [f"... ({len(lines) - 20} more)"])

    for key, value in list(event_dict.items()):
        if key in ("metrics", "diagnostics", "files", "event"):
            continue
        if isinstance(value, dict) and len(str(value)) > max_length:
            event_dict[key] = f"<dict with {len(value)} entries>"
        elif isinstance(value, (list, tuple)) and len(str(value)) > max_length:
            event_dict[key] = f"<{type(value).__name__} with {len(value)} entries>"
        elif isinstance(value, str) and len(value) > max_length:
            event_dict[key] = f"{value[:max_length]}..."

    return event_dict


def setup_logging(name: str, environment: str = "local", log_level: str | None = None) -> Any:
    """Configure structured logging for jobs and test runs.

    An explicit log_level wins over the LOG_LEVEL environment variable.
    """

    log_level_str = (log_level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    level = _get_log_level(log_level_str)

    # Respect NO_COLOR and FORCE_COLOR environment variables
    use_colors = bool(
        sys.stderr.isatty()
        and not os.environ.get("NO_COLOR")
        and (os.environ.get("FORCE_COLOR") or environment == "local")
    )

    base_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        _add_exception_context,
        _truncate_long_values,
    ]

    if environment in ["dev", "staging", "prod"]:
        processors = base_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.JSONRenderer(serializer=JSON_SERIALIZER),
        ]
    else:
        processors = base_processors + [
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
            structlog.dev.set_exc_info,
            structlog.dev.ConsoleRenderer(
                colors=use_colors,
                sort_keys=False,
                exception_formatter=structlog.dev.plain_traceback,
            ),
        ]

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
        force=environment == "local",
    )

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(name)
