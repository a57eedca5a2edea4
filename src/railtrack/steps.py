"""
Pipe-style operations — the canonical steps as plain functions.

Every function takes the track first, so pipelines read top to bottom with
nothing but nested calls or functools.reduce. The first argument may be a
Track, a tagged pair or a bare value:

    from railtrack import steps
    from railtrack.result import ok

    track = steps.memorize_many(5, {"cow": 6, "dog": 2})
    track = steps.run(track, lambda x, y: ok(x / y), "ratio", using=["cow", "dog"])
    steps.terminate(track)  # (Tag.OK, 3.0)

Alternative names used by older pipelines are kept as aliases at the bottom.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, Optional

from railtrack.options import InputMode, StepOptions, TrackFilter
from railtrack.result import TaggedPair
from railtrack.track import Track


def step(track: Any, function: Callable[..., Any], options: StepOptions) -> Track:
    """Run `function` under explicit StepOptions."""
    return Track.coerce(track).step(function, options)


def run(
    track: Any,
    function: Callable[..., Any],
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    trap_exceptions: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """
    Operates only on the OK track.

        >>> terminate(run(5, lambda x: (Tag.OK, x + 9)))
        (Tag.OK, 14)
    """
    return Track.coerce(track).run(
        function, name, wrap=wrap, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode
    )


def attempt(
    track: Any,
    function: Callable[..., Any],
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """`run` with any exception turned into an error-track value."""
    return Track.coerce(track).attempt(function, name, wrap=wrap, using=using, input_mode=input_mode)


def recover(
    track: Any,
    function: Callable[..., Any],
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    trap_exceptions: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """
    Operates only on the ERROR track; an OK return recovers.

        >>> terminate(recover((Tag.ERROR, 3), lambda x: (Tag.OK, x * 2)))
        (Tag.OK, 6)
    """
    return Track.coerce(track).recover(
        function, name, wrap=wrap, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode
    )


def check(
    track: Any,
    function: Callable[..., Any],
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    trap_exceptions: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """Operates on both tracks, retains the value, never recovers."""
    return Track.coerce(track).check(
        function, name, wrap=wrap, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode
    )


def tap(
    track: Any,
    function: Callable[..., Any],
    *,
    on: TrackFilter = TrackFilter.OK,
    trap_exceptions: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """Side effect only; the return value is ignored."""
    return Track.coerce(track).tap(
        function, on=on, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode
    )


def note(
    track: Any,
    function: Callable[..., Any],
    name: Optional[str] = None,
    *,
    trap_exceptions: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """Observation from either track."""
    return Track.coerce(track).note(
        function, name, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode
    )


def memorize(track: Any, name: str, value: Any) -> Track:
    return Track.coerce(track).memorize(name, value)


def memorize_many(track: Any, facts: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> Track:
    return Track.coerce(track).memorize_many(facts)


def recall(track: Any, names: Iterable[str], strict: bool = False) -> tuple[Any, ...]:
    return Track.coerce(track).recall(names, strict=strict)


def lookup(track: Any, names: Iterable[str], name: Optional[str] = None, strict: bool = False) -> Track:
    return Track.coerce(track).lookup(names, name, strict=strict)


def to_named_map(
    track: Any,
    track_filter: TrackFilter = TrackFilter.BOTH,
    with_tags: bool = False,
) -> dict[str, Any]:
    return Track.coerce(track).to_named_map(track_filter, with_tags=with_tags)


def terminate(
    track: Any,
    report: Optional[TrackFilter] = None,
    with_tags: bool = False,
) -> TaggedPair | dict[str, Any]:
    """(tag, value) of the current result, or the named map when `report` is given."""
    return Track.coerce(track).terminate(report, with_tags=with_tags)


def growl(
    track: Any,
    function: Callable[..., Any],
    *,
    trap_exceptions: bool = False,
    using: Optional[Iterable[str]] = None,
    input_mode: Optional[InputMode] = None,
) -> Track:
    """Side effect on the ERROR track only."""
    return Track.coerce(track).growl(
        function,
        trap_exceptions=trap_exceptions,
        using=using,
        input_mode=input_mode,
    )


# ──────────────────────── Aliases ────────────────────────

fix = attack = hug = recover
eat = check
signal = hoot = tap
peek = talk = note
cache = memorize
rest = eol = terminate
