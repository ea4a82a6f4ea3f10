"""Structured logging helpers: per-run context fields and call tracing."""

import functools
import logging
import threading
import uuid
from typing import Any, Callable, Dict, Optional

# Thread-local storage for log context
_thread_local = threading.local()


def _current_context() -> Dict[str, Any]:
    if not hasattr(_thread_local, "context"):
        _thread_local.context = {}
    return _thread_local.context


def generate_correlation_id() -> str:
    """
    Generate a unique correlation ID for one calculation run.

    Returns:
        UUID string to use as correlation ID
    """
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the current run, or None outside a LogContext."""
    return _current_context().get("correlation_id")


def get_log_context() -> Dict[str, Any]:
    """Copy of the fields currently attached to log records."""
    return dict(_current_context())


class LogContext:
    """
    Context manager that attaches fields to every log record in its scope.

    Contexts nest: inner fields are merged over outer ones and the outer
    context is restored on exit.

    Example:
        with LogContext(correlation_id=generate_correlation_id(), week="2025-06-02"):
            with LogContext(employee="jdoe@example.com"):
                logger.info("Attributing daily hours")
                # record carries correlation_id, week and employee
    """

    def __init__(self, **fields):
        self.fields = fields
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        context = _current_context()
        self.previous_context = context.copy()
        context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self.previous_context or {}


class _ContextFilter(logging.Filter):
    """Logging filter that copies the LogContext fields onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _current_context().items():
            setattr(record, key, value)
        return True


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Decorator logging entry, exit and failure of a function.

    Args:
        func: Function to decorate (when used without arguments)
        include_args: Whether to include function arguments in logs
        level: Log level for entry and exit messages

    Returns:
        Decorated function

    Example:
        @log_function_call
        def build_payroll_report(self, schedules, employees, week_start):
            ...

        @log_function_call(include_args=True, level="INFO")
        def load_schedules(path):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            log_level = getattr(logging, level.upper())

            if include_args:
                signature = ", ".join(
                    [repr(a) for a in args] + [f"{k}={v!r}" for k, v in kwargs.items()]
                )
                logger.log(log_level, f"Calling {f.__qualname__}({signature})")
            else:
                logger.log(log_level, f"Calling {f.__qualname__}")

            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{f.__qualname__} failed: {type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

            logger.log(log_level, f"Finished {f.__qualname__}")
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
