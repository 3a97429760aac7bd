"""Request-scoped context for ``ctx`` members.

The resolver binder opens a :func:`request_context` scope around every field
invocation. Context-bound members read the scope of the task they run in, so
objects shared between concurrent requests never carry request state.
"""
from __future__ import annotations

import contextvars
from collections.abc import Mapping
from contextlib import contextmanager
from typing import Any, Iterator, Optional

__all__ = ['request_context', 'current_context', 'context_value', 'bound_value']

_MISSING = object()

# Context variable holding the execution context of the resolver being run
_request_context: contextvars.ContextVar[Any] = contextvars.ContextVar(
    'classql_request_context',
    default=_MISSING,
)


def context_value(context: Any, key: str) -> Any:
    """Read ``key`` from a mapping context or as an attribute of any other object."""
    if isinstance(context, Mapping):
        return context.get(key)
    return getattr(context, key, None)


@contextmanager
def request_context(context: Any) -> Iterator[None]:
    """Make ``context`` visible to context-bound members for the enclosed block."""
    token = _request_context.set(context)
    try:
        yield
    finally:
        _request_context.reset(token)


def current_context() -> Any:
    """The execution context of the running resolver, or ``None`` outside one."""
    ctx = _request_context.get()
    return None if ctx is _MISSING else ctx


def bound_value(key: Optional[str]) -> Any:
    ctx = _request_context.get()
    if ctx is _MISSING:
        return None
    return ctx if key is None else context_value(ctx, key)
