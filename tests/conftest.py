"""
Shared fixtures for the railtrack test suite.

Provides seed tracks used across modules and a small recorder for checking
whether (and with what) a step function was called.
"""

from __future__ import annotations

from typing import Any

import pytest

from railtrack import Tag, Track


class CallRecorder:
    """Step function stand-in that records its arguments and returns a fixed value."""

    def __init__(self, returns: Any = (Tag.OK, "recorded")) -> None:
        self.returns = returns
        self.calls: list[tuple[Any, ...]] = []

    def __call__(self, *args: Any) -> Any:
        self.calls.append(args)
        return self.returns

    @property
    def called(self) -> bool:
        return bool(self.calls)


@pytest.fixture()
def recorder() -> CallRecorder:
    """A step function that returns (Tag.OK, 'recorded') and remembers its calls."""
    return CallRecorder()


@pytest.fixture()
def facts() -> Track:
    """An OK track holding the memorized facts bunnies=3 and swords=2."""
    return Track.of(0).memorize_many({"bunnies": 3, "swords": 2})


@pytest.fixture()
def failed() -> Track:
    """A track already on the error track with payload 'too many bunnies'."""
    return Track.from_pair(Tag.ERROR, "too many bunnies")
