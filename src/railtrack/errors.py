"""
Error taxonomy — what can go wrong on and around the railway.

Two very different kinds of problem live here:

  - Track errors the engine itself produces (a missing memory, a NAMED_ARGS
    step with nothing to apply). These are ordinary values carried on the
    error track as a FailureDescription, so a pipeline can report or recover.
  - Programming errors in the pipeline definition (a step function returning
    the wrong shape, an option combination that can never do anything).
    These raise, because silently coercing them would hide real bugs.

Enum + frozen dataclass keep the carried errors comparable and printable.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import Any, Optional


@unique
class ErrorCode(Enum):
    """
    Codes for error values produced by the engine rather than by step functions.

    The member values double as the canonical markers used in recall output.
    """

    MEMORY_NOT_FOUND = "memory_not_found"
    """A recalled name has no non-skipped entry in the history."""

    CANNOT_APPLY_NON_LIST_VALUE = "cannot_apply_non_list_value"
    """A NAMED_ARGS step found something other than a list/tuple to apply."""

    def __repr__(self) -> str:
        return f"ErrorCode.{self.name}"


@dataclass(frozen=True, slots=True)
class FailureDescription:
    """
    Immutable error value placed on the error track by the engine.

    >>> desc = FailureDescription(ErrorCode.MEMORY_NOT_FOUND, "No memory named 'hats'")
    >>> desc.code
    ErrorCode.MEMORY_NOT_FOUND
    """

    code: ErrorCode
    message: str
    exception: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @staticmethod
    def create(
        code: ErrorCode,
        message: str,
        exception: Optional[BaseException] = None,
    ) -> FailureDescription:
        """Factory mirroring the positional constructor, for readability at call sites."""
        return FailureDescription(code=code, message=message, exception=exception)

    def full_stack_trace(self) -> str:
        """Message plus the formatted exception chain, if an exception is attached."""
        if self.exception is None:
            return self.message
        tb = "".join(traceback.format_exception(type(self.exception), self.exception, self.exception.__traceback__))
        return f"{self.message}\n{tb}"


# ──────────────────────── Raised errors ────────────────────────


class RailtrackError(Exception):
    """Base class for every exception raised by railtrack itself."""


class ContractViolationError(RailtrackError, TypeError):
    """
    A step function without `wrap` returned something other than a tagged pair.

    Raised rather than coerced: the pipeline author wrote a bug.
    """

    def __init__(self, function: Any, name: Optional[str], returned: Any) -> None:
        self.function = function
        self.step_name = name
        self.returned = returned
        super().__init__(
            f"Return value for function {_describe(function)} via name {name!r} "
            f"must be of the form (Tag.OK | Tag.ERROR, value), got {returned!r}"
        )


class InvalidOptionsError(RailtrackError, ValueError):
    """A StepOptions combination that is contradictory or can never take effect."""


class MemoryNotFoundError(RailtrackError, LookupError):
    """Strict recall asked for names that have no non-skipped history entry."""

    def __init__(self, missing: tuple[str, ...]) -> None:
        self.missing = missing
        super().__init__(f"No memory recorded for: {', '.join(missing)}")


def _describe(function: Any) -> str:
    return getattr(function, "__qualname__", None) or repr(function)
