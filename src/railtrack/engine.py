"""
Resolution engine — the one place where a step actually happens.

Given a Track, a step function and its StepOptions, `resolve` decides whether
the step is eligible, calls the function with the input shape the options ask
for, reads its return, merges tag and value by policy and appends the
outcome to the history:

    eligible? ──no──→ record skipped copy of current (current unchanged)
        │
       yes
        │
    build input ──unavailable──→ (ERROR, FailureDescription)
        │                                │
    call function ──raises + trap──→ (ERROR, exception)
        │                                │
    read return ──malformed + trap──→ (ERROR, ContractViolationError)
        │                                │
        └──────────→ merge tag (control) + value (policy) ──→ advance

Every other operation in railtrack is a thin preset over `resolve` or
`memorize_result`. Exceptions are only caught at the single invocation
boundary below, and only when the step opted in with trap_exceptions.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any, Optional

import structlog

from railtrack.errors import ContractViolationError, ErrorCode, FailureDescription
from railtrack.options import InputMode, StepOptions, ValuePolicy
from railtrack.result import Result, Tag, TaggedPair, as_tagged_pair

if TYPE_CHECKING:
    from railtrack.track import Track

log = structlog.get_logger()


def resolve(track: Track, function: Callable[..., Any], options: StepOptions) -> Track:
    """
    Run one step against `track` and return the new Track.

    Raises whatever the step function raises unless options.trap_exceptions
    is set, and ContractViolationError when an unwrapped function returns
    something other than a tagged pair.
    """
    current = track.current
    if not options.is_eligible(current.tag):
        log.debug(
            "step.skipped",
            step=options.name,
            tag=current.tag.value,
            track_filter=options.track_filter.value,
        )
        return track.record(current.skipped(options.name))

    new_tag, new_value = _invoke(track, function, options)
    merged_tag = options.control.merge(current.tag, new_tag)
    merged_value = new_value if options.value_policy is ValuePolicy.REPLACE else current.value
    return track.advance(Result(tag=merged_tag, name=options.name, value=merged_value))


def memorize_result(track: Track, name: Optional[str], value: Any) -> Track:
    """Store `value` under `name` without calling anything; the tag is left as it is."""
    return track.advance(Result(tag=track.current.tag, name=name, value=value))


# ──────────────────────── Invocation ────────────────────────


def _invoke(track: Track, function: Callable[..., Any], options: StepOptions) -> TaggedPair:
    arguments = _arguments(track, options)
    if isinstance(arguments, FailureDescription):
        log.info("step.input_unavailable", step=options.name, code=arguments.code.value)
        return (Tag.ERROR, arguments)

    if not options.trap_exceptions:
        return _interpret(function, function(*arguments), options)

    # A malformed return is trapped like any other exception.
    try:
        return _interpret(function, function(*arguments), options)
    except Exception as e:
        log.warning("step.exception_trapped", step=options.name, error=repr(e))
        return (Tag.ERROR, e)


def _interpret(function: Callable[..., Any], returned: Any, options: StepOptions) -> TaggedPair:
    if options.wrap:
        return (Tag.OK, returned)
    pair = as_tagged_pair(returned)
    if pair is None:
        raise ContractViolationError(function, options.name, returned)
    return pair


def _arguments(track: Track, options: StepOptions) -> tuple[Any, ...] | FailureDescription:
    match options.input_mode:
        case InputMode.CURRENT:
            return (track.current.value,)
        case InputMode.NONE:
            return ()
        case InputMode.HISTORY:
            return (track.history,)
        case InputMode.NAMED_ARGS:
            return _named_arguments(track, options)
    raise TypeError("unreachable")  # pragma: no cover


def _named_arguments(track: Track, options: StepOptions) -> tuple[Any, ...] | FailureDescription:
    if options.using is None:
        value = track.current.value
        if not isinstance(value, (list, tuple)):
            return FailureDescription(
                ErrorCode.CANNOT_APPLY_NON_LIST_VALUE,
                f"Cannot apply non-list value {value!r} as arguments",
            )
        values = tuple(value)
        labels = tuple(f"#{i}" for i in range(len(values)))
    else:
        values = track.recall(options.using)
        labels = options.using

    missing = [label for label, v in zip(labels, values) if v is ErrorCode.MEMORY_NOT_FOUND]
    if missing:
        return FailureDescription(
            ErrorCode.MEMORY_NOT_FOUND,
            f"No memory recorded for: {', '.join(missing)}",
        )
    return values
