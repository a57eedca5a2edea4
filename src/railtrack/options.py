"""
Step configuration — the declarative knobs behind every step.

A StepOptions value tells the engine when a step may run (track_filter), how
its outcome merges into the track (control, value_policy), what the function
receives (input_mode, using) and how its return is read (wrap,
trap_exceptions).

Callers rarely build StepOptions by hand. The preset builders below name the
canonical operations and only expose the overrides that make sense for each:

    run_options()      OK track,    ATTEMPT, REPLACE
    recover_options()  ERROR track, RECOVER, REPLACE
    check_options()    both tracks, ATTEMPT, RETAIN
    tap_options()      one track,   HOLD,    RETAIN, wrapped
    note_options()     both tracks, HOLD,    RETAIN, wrapped
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, unique
from typing import Optional

from railtrack.errors import InvalidOptionsError
from railtrack.result import Tag


@unique
class TrackFilter(Enum):
    """Which track(s) a step is eligible to run on."""

    OK = "ok"
    ERROR = "error"
    BOTH = "both"

    def matches(self, tag: Tag) -> bool:
        """OK matches {OK, BOTH}; ERROR matches {ERROR, BOTH}."""
        return self is TrackFilter.BOTH or self.value == tag.value


@unique
class Control(Enum):
    """How the tag a step returns merges with the tag it started from."""

    ATTEMPT = "attempt"
    """An ERROR return wins; an OK return never overrides an existing ERROR."""

    HOLD = "hold"
    """The old tag is kept unconditionally."""

    RECOVER = "recover"
    """The new tag replaces the old one, in either direction."""

    def merge(self, old: Tag, new: Tag) -> Tag:
        match self:
            case Control.ATTEMPT:
                return Tag.ERROR if new is Tag.ERROR else old
            case Control.HOLD:
                return old
            case Control.RECOVER:
                return new
        raise TypeError("unreachable")  # pragma: no cover


@unique
class ValuePolicy(Enum):
    """Whether the carried value changes after a step."""

    REPLACE = "replace"
    RETAIN = "retain"


@unique
class InputMode(Enum):
    """What the step function is called with."""

    CURRENT = "current"
    """The current value: f(value)."""

    NAMED_ARGS = "named_args"
    """Recalled values applied positionally: f(*values)."""

    NONE = "none"
    """Nothing: f()."""

    HISTORY = "history"
    """The full history tuple: f(history)."""


@dataclass(frozen=True, slots=True)
class StepOptions:
    """
    Configuration of a single step invocation.

    Validated on construction so that contradictory or inert combinations
    fail where the pipeline is written, not somewhere down the track.
    """

    name: Optional[str] = None
    track_filter: TrackFilter = TrackFilter.OK
    control: Control = Control.ATTEMPT
    value_policy: ValuePolicy = ValuePolicy.REPLACE
    wrap: bool = False
    trap_exceptions: bool = False
    input_mode: InputMode = InputMode.CURRENT
    using: Optional[tuple[str, ...]] = None

    def __post_init__(self) -> None:
        if isinstance(self.using, str):
            raise InvalidOptionsError(f"'using' takes a list of names, got the string {self.using!r}")
        if self.control is Control.RECOVER and self.track_filter is TrackFilter.OK:
            raise InvalidOptionsError(
                "control=RECOVER with track_filter=OK can never change the track; "
                "use track_filter=ERROR or BOTH"
            )
        if self.using is not None and self.input_mode is not InputMode.NAMED_ARGS:
            raise InvalidOptionsError(
                f"'using' names are only read with input_mode=NAMED_ARGS, got {self.input_mode.name}"
            )

    def is_eligible(self, tag: Tag) -> bool:
        return self.track_filter.matches(tag)


# ──────────────────────── Preset builders ────────────────────────


def _input(input_mode: Optional[InputMode], using: Optional[Iterable[str]]) -> tuple[InputMode, Optional[tuple[str, ...]]]:
    """Resolve the input mode implied by an optional `using` list."""
    if isinstance(using, str):
        raise InvalidOptionsError(f"'using' takes a list of names, got the string {using!r}")
    names = tuple(using) if using is not None else None
    if input_mode is None:
        input_mode = InputMode.NAMED_ARGS if names is not None else InputMode.CURRENT
    return input_mode, names


def run_options(
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    trap_exceptions: bool = False,
    input_mode: Optional[InputMode] = None,
    using: Optional[Iterable[str]] = None,
) -> StepOptions:
    """The default happy-path step."""
    mode, names = _input(input_mode, using)
    return StepOptions(
        name=name,
        track_filter=TrackFilter.OK,
        control=Control.ATTEMPT,
        value_policy=ValuePolicy.REPLACE,
        wrap=wrap,
        trap_exceptions=trap_exceptions,
        input_mode=mode,
        using=names,
    )


def recover_options(
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    trap_exceptions: bool = False,
    input_mode: Optional[InputMode] = None,
    using: Optional[Iterable[str]] = None,
) -> StepOptions:
    """Runs only on the error track; an OK return brings the track back to OK."""
    mode, names = _input(input_mode, using)
    return StepOptions(
        name=name,
        track_filter=TrackFilter.ERROR,
        control=Control.RECOVER,
        value_policy=ValuePolicy.REPLACE,
        wrap=wrap,
        trap_exceptions=trap_exceptions,
        input_mode=mode,
        using=names,
    )


def check_options(
    name: Optional[str] = None,
    *,
    wrap: bool = False,
    trap_exceptions: bool = False,
    input_mode: Optional[InputMode] = None,
    using: Optional[Iterable[str]] = None,
) -> StepOptions:
    """
    Runs on both tracks and can only move OK → ERROR.

    The carried value is retained: a check judges the value, it never replaces it.
    """
    mode, names = _input(input_mode, using)
    return StepOptions(
        name=name,
        track_filter=TrackFilter.BOTH,
        control=Control.ATTEMPT,
        value_policy=ValuePolicy.RETAIN,
        wrap=wrap,
        trap_exceptions=trap_exceptions,
        input_mode=mode,
        using=names,
    )


def tap_options(
    on: TrackFilter = TrackFilter.OK,
    *,
    trap_exceptions: bool = False,
    input_mode: Optional[InputMode] = None,
    using: Optional[Iterable[str]] = None,
) -> StepOptions:
    """Side effect only: neither tag nor value can change, whatever the function returns."""
    mode, names = _input(input_mode, using)
    return StepOptions(
        track_filter=on,
        control=Control.HOLD,
        value_policy=ValuePolicy.RETAIN,
        wrap=True,
        trap_exceptions=trap_exceptions,
        input_mode=mode,
        using=names,
    )


def note_options(
    name: Optional[str] = None,
    *,
    trap_exceptions: bool = False,
    input_mode: Optional[InputMode] = None,
    using: Optional[Iterable[str]] = None,
) -> StepOptions:
    """Pure observation from either track; value and tag are both pinned."""
    mode, names = _input(input_mode, using)
    return StepOptions(
        name=name,
        track_filter=TrackFilter.BOTH,
        control=Control.HOLD,
        value_policy=ValuePolicy.RETAIN,
        wrap=True,
        trap_exceptions=trap_exceptions,
        input_mode=mode,
        using=names,
    )
