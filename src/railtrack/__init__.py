"""
railtrack — a railway pipeline engine with named history.

Chain steps that may succeed or fail. Failure short-circuits the happy-path
steps that follow while keeping every outcome in history; recovery steps
bring a failed computation back onto the OK track.

    from railtrack import Track, ok, error

    outcome = (
        Track.of(10)
        .run(lambda x: error("too many bunnies") if x > 5 else ok(x))
        .run(lambda _: ok("ignored"))
        .recover(lambda reason: ok(f"handled: {reason}"))
        .terminate()
    )
    # (Tag.OK, 'handled: too many bunnies')
"""

from railtrack.result import Result, Tag, ok, error
from railtrack.errors import (
    ErrorCode,
    FailureDescription,
    RailtrackError,
    ContractViolationError,
    InvalidOptionsError,
    MemoryNotFoundError,
)
from railtrack.options import (
    TrackFilter,
    Control,
    ValuePolicy,
    InputMode,
    StepOptions,
)
from railtrack.track import Track
from railtrack.execution import (
    ExecutionContext,
    NoOpExecutionContext,
    LoggingExecutionContext,
    ComposableExecutionContext,
    with_context,
)
from railtrack.assertions import TrackAssertions

__all__ = [
    "Result",
    "Tag",
    "ok",
    "error",
    "ErrorCode",
    "FailureDescription",
    "RailtrackError",
    "ContractViolationError",
    "InvalidOptionsError",
    "MemoryNotFoundError",
    "TrackFilter",
    "Control",
    "ValuePolicy",
    "InputMode",
    "StepOptions",
    "Track",
    "ExecutionContext",
    "NoOpExecutionContext",
    "LoggingExecutionContext",
    "ComposableExecutionContext",
    "with_context",
    "TrackAssertions",
]

__version__ = "0.1.0"
