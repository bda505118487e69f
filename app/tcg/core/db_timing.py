"""Per-request SQL time accounting.

Sync endpoints and dependencies run in a worker thread with a *copy* of the
request context, so the context variable holds a mutable accumulator that
the copy shares with the middleware instead of a plain float.
"""

from __future__ import annotations

from contextvars import ContextVar, Token
from dataclasses import dataclass


@dataclass
class QueryClock:
    total_ms: float = 0.0


_request_clock: ContextVar[QueryClock | None] = ContextVar("request_query_clock", default=None)


def begin_request_timing() -> Token:
    return _request_clock.set(QueryClock())


def end_request_timing(token: Token) -> None:
    _request_clock.reset(token)


def record_query_time(elapsed_ms: float) -> None:
    clock = _request_clock.get()
    if clock is None:
        return
    clock.total_ms += elapsed_ms


def current_db_time_ms() -> float | None:
    clock = _request_clock.get()
    return clock.total_ms if clock is not None else None
