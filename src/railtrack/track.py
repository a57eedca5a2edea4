"""
Track — the value threaded through a railway pipeline.

A Track holds the current Result (the authoritative state) and the full,
append-only history of every step attempted, skipped ones included. It is a
frozen dataclass: each step returns a new Track and leaves the old one
untouched, so a pipeline can be branched or replayed freely.

Steps can be chained fluently:

    outcome = (
        Track.of(10)
        .run(lambda x: ok(x * 2), "doubled")
        .check(lambda x: ok(x) if x < 100 else error("too many bunnies"))
        .recover(lambda _: ok(0))
        .terminate()
    )

or applied pipe-style through railtrack.steps, which accepts bare values and
tagged pairs as well as Tracks.

Named results double as memory: `memorize` stores facts, `recall` reads them
back (latest non-skipped entry wins) and `using=[...]` applies them as the
positional arguments of a step.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog

from railtrack import engine
from railtrack.errors import ErrorCode, MemoryNotFoundError
from railtrack.options import (
    InputMode,
    StepOptions,
    TrackFilter,
    check_options,
    note_options,
    recover_options,
    run_options,
    tap_options,
)
from railtrack.result import Result, Tag, TaggedPair, as_tagged_pair, to_tag

log = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class Track:
    """
    Current Result plus chronological history.

    The seed Result is `current` but not part of `history`, so the history
    length always equals the number of steps attempted.
    """

    current: Result
    history: tuple[Result, ...] = field(default=())

    # ──────────────────────── Construction ────────────────────────

    @staticmethod
    def of(value: Any) -> Track:
        """Start a pipeline on the OK track with a bare value."""
        return Track(current=Result(tag=Tag.OK, value=value))

    @staticmethod
    def from_pair(tag: Tag | str, value: Any) -> Track:
        """Start a pipeline in an explicit state: Track.from_pair(Tag.ERROR, 3)."""
        resolved = to_tag(tag)
        if resolved is None:
            raise ValueError(f"Unknown tag {tag!r}; expected Tag.OK, Tag.ERROR, 'ok' or 'error'")
        return Track(current=Result(tag=resolved, value=value))

    @staticmethod
    def coerce(candidate: Any) -> Track:
        """
        Turn anything a pipeline may start from into a Track.

        Tracks pass through, tagged pairs keep their tag, every other value
        starts on the OK track.
        """
        if isinstance(candidate, Track):
            return candidate
        pair = as_tagged_pair(candidate)
        if pair is not None:
            return Track.from_pair(*pair)
        return Track.of(candidate)

    # ──────────────────────── Introspection ────────────────────────

    @property
    def tag(self) -> Tag:
        return self.current.tag

    @property
    def value(self) -> Any:
        return self.current.value

    def is_ok(self) -> bool:
        return self.current.is_ok()

    def is_error(self) -> bool:
        return self.current.is_error()

    def __bool__(self) -> bool:
        """A Track is truthy only while it is on the OK track."""
        return self.is_ok()

    # ──────────────────────── Persistent updates ────────────────────────

    def advance(self, result: Result) -> Track:
        """New Track with `result` appended to the history and made current."""
        return Track(current=result, history=(*self.history, result))

    def record(self, result: Result) -> Track:
        """New Track with `result` appended to the history; current is unchanged."""
        return Track(current=self.current, history=(*self.history, result))

    # ──────────────────────── Memory ────────────────────────

    def find(self, name: str) -> Optional[Result]:
        """Latest non-skipped Result recorded under `name`, or None."""
        for result in reversed(self.history):
            if result.is_recallable_as(name):
                return result
        return None

    def recall(self, names: Iterable[str], strict: bool = False) -> tuple[Any, ...]:
        """
        Values recorded under each of `names`, in the order asked.

        A missing name yields ErrorCode.MEMORY_NOT_FOUND in its slot, or
        raises MemoryNotFoundError when `strict` is set.
        """
        if isinstance(names, str):
            raise TypeError(f"recall takes a list of names, got the string {names!r}")
        names = tuple(names)
        found = [self.find(name) for name in names]
        missing = tuple(name for name, result in zip(names, found) if result is None)
        if missing:
            if strict:
                raise MemoryNotFoundError(missing)
            log.info("recall.memory_not_found", names=missing)
        return tuple(ErrorCode.MEMORY_NOT_FOUND if result is None else result.value for result in found)

    def to_named_map(
        self,
        track_filter: TrackFilter = TrackFilter.BOTH,
        with_tags: bool = False,
    ) -> dict[str, Any]:
        """
        Project the history into name → value (or name → (tag, value)).

        Last write wins per name; skipped and unnamed entries are left out.
        Keys are ordered by their latest write.
        """
        named: dict[str, Any] = {}
        for result in self.history:
            if result.skip or result.name is None or not track_filter.matches(result.tag):
                continue
            named.pop(result.name, None)
            named[result.name] = result.as_pair() if with_tags else result.value
        return named

    def named_oks(self) -> dict[str, Any]:
        return self.to_named_map(TrackFilter.OK)

    def named_errors(self) -> dict[str, Any]:
        return self.to_named_map(TrackFilter.ERROR)

    # ──────────────────────── Steps ────────────────────────

    def step(self, function: Callable[..., Any], options: StepOptions) -> Track:
        """Run `function` under explicit options; the presets below all end up here."""
        return engine.resolve(self, function, options)

    def run(
        self,
        function: Callable[..., Any],
        name: Optional[str] = None,
        *,
        wrap: bool = False,
        trap_exceptions: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """Happy-path step: runs on OK, an ERROR return moves the track to ERROR."""
        return self.step(
            function,
            run_options(name, wrap=wrap, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode),
        )

    def attempt(
        self,
        function: Callable[..., Any],
        name: Optional[str] = None,
        *,
        wrap: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """`run` with exceptions trapped onto the error track."""
        return self.run(function, name, wrap=wrap, trap_exceptions=True, using=using, input_mode=input_mode)

    def recover(
        self,
        function: Callable[..., Any],
        name: Optional[str] = None,
        *,
        wrap: bool = False,
        trap_exceptions: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """Runs only on ERROR; an OK return brings the track back to OK."""
        return self.step(
            function,
            recover_options(name, wrap=wrap, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode),
        )

    def check(
        self,
        function: Callable[..., Any],
        name: Optional[str] = None,
        *,
        wrap: bool = False,
        trap_exceptions: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """Runs on either track, keeps the value and can only move OK → ERROR."""
        return self.step(
            function,
            check_options(name, wrap=wrap, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode),
        )

    def tap(
        self,
        function: Callable[..., Any],
        *,
        on: TrackFilter = TrackFilter.OK,
        trap_exceptions: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """Side effect on the `on` track; tag and value are left exactly as they were."""
        return self.step(
            function,
            tap_options(on, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode),
        )

    def growl(
        self,
        function: Callable[..., Any],
        *,
        trap_exceptions: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """Side effect on the ERROR track only."""
        return self.tap(
            function,
            on=TrackFilter.ERROR,
            trap_exceptions=trap_exceptions,
            using=using,
            input_mode=input_mode,
        )

    def note(
        self,
        function: Callable[..., Any],
        name: Optional[str] = None,
        *,
        trap_exceptions: bool = False,
        using: Optional[Iterable[str]] = None,
        input_mode: Optional[InputMode] = None,
    ) -> Track:
        """Observe from either track without changing anything."""
        return self.step(
            function,
            note_options(name, trap_exceptions=trap_exceptions, using=using, input_mode=input_mode),
        )

    def memorize(self, name: str, value: Any) -> Track:
        """Store a fact under `name`; the tag is unchanged."""
        return engine.memorize_result(self, name, value)

    def memorize_many(self, facts: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> Track:
        """Memorize each (name, value) in order."""
        pairs = facts.items() if isinstance(facts, Mapping) else facts
        track = self
        for name, value in pairs:
            track = track.memorize(name, value)
        return track

    def lookup(self, names: Iterable[str], name: Optional[str] = None, strict: bool = False) -> Track:
        """
        Recall `names` into a new track state.

        A following step with input_mode=NAMED_ARGS (and no `using`) applies
        the recalled tuple as its arguments.
        """
        return engine.memorize_result(self, name, self.recall(names, strict=strict))

    # ──────────────────────── Terminal ────────────────────────

    def terminate(
        self,
        report: Optional[TrackFilter] = None,
        with_tags: bool = False,
    ) -> TaggedPair | dict[str, Any]:
        """
        Collapse the track.

        Without `report`, returns the current (tag, value). With a TrackFilter,
        returns the named map of the history filtered to that track.
        """
        if report is None:
            return self.current.as_pair()
        return self.to_named_map(report, with_tags=with_tags)

    def within(self, execution_context: Any) -> Track:
        """Hand this Track to an execution context (see railtrack.execution)."""
        return execution_context.execute(lambda: self)

    def __repr__(self) -> str:
        return f"Track({self.current.tag.name}: {self.current.value!r}, steps={len(self.history)})"
