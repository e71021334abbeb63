from contextvars import ContextVar
from uuid import uuid4

logger_context = ContextVar("logger_context", default=None)


def get_context() -> dict:
    return logger_context.get() or {}


def add_context(context: dict):
    logger_context.set({**get_context(), **context})


def clear_context(*keys: str):
    current_context = get_context()

    logger_context.set({k: v for k, v in current_context.items() if k not in keys})


def start_run():
    """One run id per process invocation (CLI command or scheduler start)."""
    add_context({"run_id": str(uuid4())})


def start_trace():
    """One trace id per task execution."""
    add_context({"trace_id": str(uuid4())})
