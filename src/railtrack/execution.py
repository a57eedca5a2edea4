"""
Execution contexts — separate WHAT a pipeline computes from HOW it is run.

A pipeline is pure: it threads a Track through steps and returns a new one.
Anything around it (timing, logging, a caller's own resource handling) lives
in an execution context that receives the pipeline as a zero-argument
computation:

    def pipeline(order) -> Track:
        return (
            Track.of(order)
            .run(validate, "validated")
            .run(price, "priced")
            .recover(apply_fallback_price)
        )

    track = LoggingExecutionContext(operation="PriceOrder").execute(lambda: pipeline(order))

    # or with the decorator
    @with_context(LoggingExecutionContext(operation="PriceOrder"))
    def price_order(order) -> Track:
        return pipeline(order)

Contexts never swallow exceptions: an exception escaping the computation is
an untrapped step failure and keeps propagating after it has been logged.
"""

from __future__ import annotations

import functools
import logging
import time
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

import structlog

if TYPE_CHECKING:
    from railtrack.track import Track

log = structlog.get_logger()


# ──────────────────────── Protocol (Interface) ────────────────────────


@runtime_checkable
class ExecutionContext(Protocol):
    """
    Anything with execute(computation) -> Track.

    Structural typing: no inheritance needed to satisfy the protocol.
    """

    def execute(self, computation: Callable[[], Track]) -> Track:
        """Run a Track-returning computation within this context."""
        ...


# ──────────────────────── NoOp (Testing) ────────────────────────


class NoOpExecutionContext:
    """Runs the computation as-is. Useful in tests and as the innermost default."""

    def execute(self, computation: Callable[[], Track]) -> Track:
        return computation()


# ──────────────────────── Logging ────────────────────────


class LoggingExecutionContext:
    """
    Logs start, duration, final tag and history length of a pipeline.

    Wraps another context (decorator pattern):

        ctx = LoggingExecutionContext(inner=my_context, operation="Import")
    """

    def __init__(
        self,
        inner: ExecutionContext | None = None,
        operation: str = "unknown",
        log_level: int = logging.INFO,
    ) -> None:
        self._inner = inner or NoOpExecutionContext()
        self._operation = operation
        self._log_level = log_level

    def execute(self, computation: Callable[[], Track]) -> Track:
        log.log(self._log_level, "pipeline.started", operation=self._operation)
        start = time.monotonic()

        try:
            track = self._inner.execute(computation)
        except Exception as e:
            log.error(
                "pipeline.failed",
                operation=self._operation,
                elapsed=round(time.monotonic() - start, 3),
                error=repr(e),
            )
            raise

        log.log(
            self._log_level,
            "pipeline.completed",
            operation=self._operation,
            elapsed=round(time.monotonic() - start, 3),
            tag=track.tag.value,
            steps=len(track.history),
        )
        return track


# ──────────────────────── Composable ────────────────────────


class ComposableExecutionContext:
    """
    Compose several contexts into one; the first given is the outermost.

        composed = ComposableExecutionContext(
            LoggingExecutionContext(operation="Import"),
            TimingContext(),
        )
        # Logging wraps Timing wraps computation
    """

    def __init__(self, *contexts: ExecutionContext) -> None:
        if not contexts:
            raise ValueError("At least one execution context is required")
        self._contexts = list(contexts)

    def execute(self, computation: Callable[[], Track]) -> Track:
        wrapped = computation
        for ctx in reversed(self._contexts):
            prev = wrapped
            wrapped = lambda _ctx=ctx, _prev=prev: _ctx.execute(_prev)
        return wrapped()


# ──────────────────────── Decorator Helper ────────────────────────


def with_context(ctx: ExecutionContext) -> Callable:
    """
    Run every call of the decorated Track-returning function inside `ctx`.

        @with_context(LoggingExecutionContext(operation="Import"))
        def handle(rows) -> Track:
            return Track.of(rows).run(parse).run(store)
    """

    def decorator(fn: Callable[..., Track]) -> Callable[..., Track]:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Track:
            return ctx.execute(lambda: fn(*args, **kwargs))
        return wrapper
    return decorator
