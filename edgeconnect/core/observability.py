"""Observability for edgeconnect.

Structured logging through structlog (bridged onto the stdlib logging tree so
`logging.getLogger(__name__)` in services and adapters ends up in the same
stream), correlation-id helpers for request scoping, and the `trace_call`
decorator for service entry points.
"""

import functools
import inspect
import json
import logging
import re
import sys
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

import structlog
from pydantic import BaseModel
from structlog.contextvars import bind_contextvars, unbind_contextvars

_SHARED_PROCESSORS: list[Any] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.UnicodeDecoder(),
]

structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        *_SHARED_PROCESSORS,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Device credentials end up in arguments and results (access tokens, MQTT passwords)
_SENSITIVE_KEY_RE = re.compile(
    r"(token|password|secret|credentials_id|credentials_value|authorization)", re.IGNORECASE
)


def configure_stdlib_json_logging(level: str = "INFO", file_target: str | None = None) -> None:
    """Route stdlib and structlog records through one structlog formatter.

    Console output is rendered for humans on a TTY and as JSON otherwise;
    the optional file target always receives JSON lines.
    """
    console_renderer: Any = (
        structlog.dev.ConsoleRenderer() if sys.stderr.isatty() else structlog.processors.JSONRenderer()
    )

    def _formatter(renderer: Any) -> structlog.stdlib.ProcessorFormatter:
        return structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.format_exc_info,
                renderer,
            ],
        )

    handlers: list[logging.Handler] = []
    console = logging.StreamHandler()
    console.setFormatter(_formatter(console_renderer))
    handlers.append(console)

    if file_target:
        file_handler = logging.FileHandler(file_target, encoding="utf-8")
        file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers = handlers
    root.setLevel(level.upper())


def set_correlation_id(correlation_id: str) -> None:
    bind_contextvars(correlation_id=correlation_id)


def clear_correlation_id() -> None:
    unbind_contextvars("correlation_id")


def _mask_scalar(value: Any) -> Any:
    if value is None:
        return None
    s = str(value)
    if len(s) <= 8:
        return "***"
    return f"{s[:4]}…{s[-3:]}"


def redact(obj: Any) -> Any:
    """Mask values stored under credential-like keys, recursively."""
    if isinstance(obj, dict):
        return {
            k: (_mask_scalar(v) if _SENSITIVE_KEY_RE.search(str(k)) else redact(v))
            for k, v in obj.items()
        }
    if isinstance(obj, list):
        return [redact(i) for i in obj]
    return obj


def _serialize_value(value: Any, max_length: int = 1000) -> Any:
    """Safely serialize a value for logging, redacting then truncating long payloads."""
    try:
        if isinstance(value, BaseModel):
            value = value.model_dump(mode="json")

        redacted = redact(json.loads(json.dumps(value, default=str)))
        json_str = json.dumps(redacted)
        if len(json_str) > max_length:
            return json_str[:max_length] + "..."
        return redacted

    except (TypeError, ValueError):
        str_repr = str(value)
        if len(str_repr) > max_length:
            return str_repr[:max_length] + "..."
        return str_repr


def trace_call(
    *,
    capture_args: bool = True,
    capture_result: bool = False,
    max_arg_length: int = 1000,
    log_level: str = "DEBUG",
    add_metadata: dict[str, Any] | None = None,
) -> Callable[[F], F]:
    """Log entry, exit, duration and failures of a sync or async function.

    Arguments and results are serialized with credentials redacted. `self`
    is never captured. Exceptions are logged and re-raised unchanged.

    Example:
        >>> @trace_call(capture_result=True)
        ... async def find_commands(base_url: str, device: Device) -> dict: ...
    """

    def decorator(func: F) -> F:
        name = f"{func.__module__}.{func.__qualname__}"
        level_no = logging.getLevelName(log_level.upper())
        skip_first = next(iter(inspect.signature(func).parameters), None) in ("self", "cls")

        def _args(args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
            if not capture_args:
                return {}
            positional = args[1:] if skip_first else args
            return {
                "args": [_serialize_value(a, max_arg_length) for a in positional],
                "kwargs": {k: _serialize_value(v, max_arg_length) for k, v in kwargs.items()},
            }

        def _done(started: float, result: Any) -> None:
            logger.log(
                level_no,
                "call_succeeded",
                function=name,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                result=_serialize_value(result, max_arg_length) if capture_result else None,
                **(add_metadata or {}),
            )

        def _failed(started: float, exc: Exception) -> None:
            logger.error(
                "call_failed",
                function=name,
                duration_ms=round((time.perf_counter() - started) * 1000, 3),
                error_type=type(exc).__name__,
                error_message=str(exc),
                **(add_metadata or {}),
            )

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                logger.log(
                    level_no,
                    "call_started",
                    function=name,
                    **_args(args, kwargs),
                )
                started = time.perf_counter()
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    _failed(started, exc)
                    raise
                _done(started, result)
                return result

            return cast(F, async_wrapper)

        @functools.wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            logger.log(
                level_no,
                "call_started",
                function=name,
                **_args(args, kwargs),
            )
            started = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception as exc:
                _failed(started, exc)
                raise
            _done(started, result)
            return result

        return cast(F, sync_wrapper)

    return decorator


def trace_service(func: F) -> F:
    """Decorator for service entry points: arguments only, DEBUG level."""
    return trace_call(capture_args=True, capture_result=False, log_level="DEBUG")(func)


def trace_adapter(func: F) -> F:
    """Decorator specifically for adapter layer functions."""
    return trace_call(
        capture_args=True,
        capture_result=True,
        log_level="DEBUG",
        add_metadata={"layer": "adapter"},
    )(func)
