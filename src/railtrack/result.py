"""
Result — the immutable record of one step's outcome.

A Result says which track a step ended on (Tag.OK or Tag.ERROR), what value
it produced, under which name it may be recalled, and whether it was only a
placeholder for a step that never ran (skip=True).

    ┌──────────┐   run    ┌──────────┐   run    ┌──────────┐
    │  Ok(5)   │──────────│  Ok(14)  │──────────│ Error(…) │
    └──────────┘          └──────────┘          └────┬─────┘
                                                     │ recover
                                                ┌────┴─────┐
                                                │  Ok(…)   │
                                                └──────────┘

Step functions talk to the engine with tagged pairs, which `ok()` and
`error()` build:

    def divide(x, y):
        if y == 0:
            return error("division_by_zero")
        return ok(x / y)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Any, Optional, TypeVar

T = TypeVar("T")


@unique
class Tag(Enum):
    """Which track a Result is on."""

    OK = "ok"
    ERROR = "error"

    def __repr__(self) -> str:
        return f"Tag.{self.name}"


type TaggedPair = tuple[Tag, Any]


def ok(value: T) -> tuple[Tag, T]:
    """Tag a value as a success: ok(3) → (Tag.OK, 3)."""
    return (Tag.OK, value)


def error(value: T) -> tuple[Tag, T]:
    """Tag a value as a failure: error("too many bunnies") → (Tag.ERROR, "too many bunnies")."""
    return (Tag.ERROR, value)


def to_tag(candidate: Any) -> Optional[Tag]:
    """
    Interpret `candidate` as a Tag, or return None if it is not one.

    Accepts Tag members and their string values ("ok", "error").
    """
    if isinstance(candidate, Tag):
        return candidate
    if isinstance(candidate, str):
        try:
            return Tag(candidate)
        except ValueError:
            return None
    return None


def as_tagged_pair(candidate: Any) -> Optional[TaggedPair]:
    """
    Normalize a step function's return to (Tag, value), or None if it is not a tagged pair.

    Only a 2-tuple whose first item is a tag counts; lists and other sequences do not.
    """
    if not isinstance(candidate, tuple) or len(candidate) != 2:
        return None
    tag = to_tag(candidate[0])
    if tag is None:
        return None
    return (tag, candidate[1])


@dataclass(frozen=True, slots=True)
class Result:
    """
    One entry of a track's history.

    `skip` marks entries produced by steps that were not eligible to run;
    they are kept for the full trace but never recalled or reported.

        >>> Result(Tag.OK, "bunnies", 3)
        Result(tag=Tag.OK, name='bunnies', value=3, skip=False)
    """

    tag: Tag = Tag.OK
    name: Optional[str] = None
    value: Any = None
    skip: bool = False

    def is_ok(self) -> bool:
        return self.tag is Tag.OK

    def is_error(self) -> bool:
        return self.tag is Tag.ERROR

    def as_pair(self) -> TaggedPair:
        """The (tag, value) view used by terminal operations."""
        return (self.tag, self.value)

    def skipped(self, name: Optional[str]) -> Result:
        """Copy of this Result standing in for a step that did not run."""
        return replace(self, name=name, skip=True)

    def is_recallable_as(self, name: str) -> bool:
        """True if a lookup for `name` may resolve to this entry."""
        return not self.skip and self.name is not None and self.name == name
