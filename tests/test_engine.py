"""
Tests for the resolution engine.

Tests cover:
  - Eligibility and skipped placeholders
  - Input shapes (current value, named args, none, history)
  - Return interpretation (tagged pairs, wrap, contract violations)
  - Exception trapping
  - Tag and value merging
  - Log events
"""

from __future__ import annotations

import pytest
from structlog.testing import capture_logs

from railtrack import (
    ContractViolationError,
    ErrorCode,
    FailureDescription,
    InputMode,
    Result,
    StepOptions,
    Tag,
    Track,
    TrackFilter,
    ValuePolicy,
    Control,
    error,
    ok,
)
from railtrack.engine import memorize_result, resolve
from railtrack.options import run_options


# ═══════════════════════════════════════════════════════════════
# 1. Eligibility
# ═══════════════════════════════════════════════════════════════


class TestEligibility:
    def test_ineligible_step_is_not_invoked(self, failed, recorder):
        track = resolve(failed, recorder, run_options("skipped"))
        assert not recorder.called

    def test_ineligible_step_records_skipped_copy(self, failed, recorder):
        track = resolve(failed, recorder, run_options("skipped"))
        assert track.current == failed.current
        assert track.history == (Result(Tag.ERROR, "skipped", "too many bunnies", skip=True),)

    def test_error_only_step_skips_on_ok(self, recorder):
        options = StepOptions(track_filter=TrackFilter.ERROR, control=Control.RECOVER)
        track = resolve(Track.of(4), recorder, options)
        assert not recorder.called
        assert track.terminate() == (Tag.OK, 4)

    def test_both_step_runs_on_either_track(self, failed, recorder):
        options = StepOptions(track_filter=TrackFilter.BOTH)
        resolve(failed, recorder, options)
        resolve(Track.of(1), recorder, options)
        assert recorder.calls == [("too many bunnies",), (1,)]


# ═══════════════════════════════════════════════════════════════
# 2. Input shapes
# ═══════════════════════════════════════════════════════════════


class TestInputModes:
    def test_current_value_is_passed(self, recorder):
        resolve(Track.of(5), recorder, StepOptions())
        assert recorder.calls == [(5,)]

    def test_none_calls_without_arguments(self, recorder):
        resolve(Track.of(5), recorder, StepOptions(input_mode=InputMode.NONE))
        assert recorder.calls == [()]

    def test_history_passes_history_tuple(self, facts, recorder):
        resolve(facts, recorder, StepOptions(input_mode=InputMode.HISTORY))
        (history,) = recorder.calls[0]
        assert history == facts.history
        assert [r.name for r in history] == ["bunnies", "swords"]

    def test_named_args_applies_recalled_values(self, facts):
        track = resolve(facts, lambda a, b: ok(a + b), run_options(using=["bunnies", "swords"]))
        assert track.terminate() == (Tag.OK, 5)

    def test_named_args_respects_order(self, facts):
        track = resolve(facts, lambda a, b: ok(a - b), run_options(using=["swords", "bunnies"]))
        assert track.terminate() == (Tag.OK, -1)

    def test_named_args_missing_memory_is_error_without_call(self, facts, recorder):
        track = resolve(facts, recorder, run_options("sum", using=["bunnies", "hats"]))
        assert not recorder.called
        assert track.is_error()
        assert isinstance(track.value, FailureDescription)
        assert track.value.code is ErrorCode.MEMORY_NOT_FOUND
        assert "hats" in track.value.message
        assert track.current.name == "sum"

    def test_named_args_from_current_list(self):
        options = StepOptions(input_mode=InputMode.NAMED_ARGS)
        track = resolve(Track.of([2, 3]), lambda a, b: ok(a * b), options)
        assert track.terminate() == (Tag.OK, 6)

    def test_named_args_from_non_list_is_error_without_call(self, recorder):
        options = StepOptions(input_mode=InputMode.NAMED_ARGS)
        track = resolve(Track.of(5), recorder, options)
        assert not recorder.called
        assert track.is_error()
        assert track.value.code is ErrorCode.CANNOT_APPLY_NON_LIST_VALUE

    def test_named_args_from_current_list_with_missing_marker(self, recorder):
        options = StepOptions(input_mode=InputMode.NAMED_ARGS)
        track = resolve(Track.of((1, ErrorCode.MEMORY_NOT_FOUND)), recorder, options)
        assert not recorder.called
        assert track.value.code is ErrorCode.MEMORY_NOT_FOUND

    def test_unavailable_input_still_respects_hold(self, facts, recorder):
        options = StepOptions(
            control=Control.HOLD,
            value_policy=ValuePolicy.RETAIN,
            input_mode=InputMode.NAMED_ARGS,
            using=("hats",),
        )
        track = resolve(facts, recorder, options)
        assert track.terminate() == facts.terminate()


# ═══════════════════════════════════════════════════════════════
# 3. Return interpretation
# ═══════════════════════════════════════════════════════════════


class TestReturnInterpretation:
    def test_ok_pair(self):
        assert resolve(Track.of(5), lambda x: ok(x + 9), StepOptions()).terminate() == (Tag.OK, 14)

    def test_error_pair(self):
        track = resolve(Track.of(10), lambda x: error(x * 5), StepOptions())
        assert track.terminate() == (Tag.ERROR, 50)

    def test_string_tags_are_accepted(self):
        track = resolve(Track.of(1), lambda x: ("error", "nope"), StepOptions())
        assert track.terminate() == (Tag.ERROR, "nope")

    def test_wrap_treats_return_as_ok_value(self):
        track = resolve(Track.of(4), lambda x: x * 3, StepOptions(wrap=True))
        assert track.terminate() == (Tag.OK, 12)

    def test_wrap_does_not_unpack_tagged_pairs(self):
        track = resolve(Track.of(4), lambda x: error(x), StepOptions(wrap=True))
        assert track.terminate() == (Tag.OK, (Tag.ERROR, 4))

    def test_bare_return_without_wrap_is_contract_violation(self):
        def add_one(x):
            return x + 1

        with pytest.raises(ContractViolationError, match="add_one") as exc_info:
            resolve(Track.of(1), add_one, StepOptions(name="inc"))
        assert exc_info.value.step_name == "inc"
        assert exc_info.value.returned == 2

    def test_contract_violation_is_a_type_error(self):
        with pytest.raises(TypeError):
            resolve(Track.of(1), lambda x: ["ok", x], StepOptions())

    def test_contract_violation_is_trapped_when_asked(self):
        with capture_logs() as logs:
            track = resolve(Track.of(1), lambda x: x + 1, StepOptions(name="inc", trap_exceptions=True))
        assert track.is_error()
        assert isinstance(track.value, ContractViolationError)
        assert track.value.returned == 2
        assert track.current.name == "inc"
        assert [e["event"] for e in logs] == ["step.exception_trapped"]

    def test_attempt_traps_contract_violation(self):
        track = Track.of(1).attempt(lambda x: x + 1)
        assert track.is_error()
        assert isinstance(track.value, ContractViolationError)


# ═══════════════════════════════════════════════════════════════
# 4. Exceptions
# ═══════════════════════════════════════════════════════════════


def _crashy_uppercase(message: str):
    raise RuntimeError(f"argh {message}")


class TestExceptions:
    def test_untrapped_exception_propagates(self):
        with pytest.raises(RuntimeError, match="argh train"):
            resolve(Track.of("train"), _crashy_uppercase, StepOptions())

    def test_trapped_exception_becomes_error_value(self):
        track = resolve(Track.of("train"), _crashy_uppercase, StepOptions(trap_exceptions=True, name="upper"))
        assert track.is_error()
        assert isinstance(track.value, RuntimeError)
        assert str(track.value) == "argh train"
        assert track.current.name == "upper"
        assert len(track.history) == 1

    def test_trapped_exception_with_wrap_is_still_error(self):
        track = resolve(Track.of("train"), _crashy_uppercase, StepOptions(trap_exceptions=True, wrap=True))
        assert track.is_error()

    def test_base_exceptions_are_never_trapped(self):
        def interrupt(_):
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            resolve(Track.of(1), interrupt, StepOptions(trap_exceptions=True))


# ═══════════════════════════════════════════════════════════════
# 5. Merging
# ═══════════════════════════════════════════════════════════════


class TestMerging:
    def test_retain_keeps_old_value(self):
        options = StepOptions(value_policy=ValuePolicy.RETAIN)
        track = resolve(Track.of(4), lambda x: ok(x * 5), options)
        assert track.terminate() == (Tag.OK, 4)

    def test_retain_with_error_moves_tag_only(self):
        options = StepOptions(value_policy=ValuePolicy.RETAIN)
        track = resolve(Track.of(4), lambda x: error("odd"), options)
        assert track.terminate() == (Tag.ERROR, 4)

    def test_attempt_on_both_cannot_recover(self, failed):
        options = StepOptions(track_filter=TrackFilter.BOTH)
        track = resolve(failed, lambda _: ok("fine"), options)
        assert track.tag is Tag.ERROR
        assert track.value == "fine"

    def test_recover_flips_back_to_ok(self):
        options = StepOptions(track_filter=TrackFilter.ERROR, control=Control.RECOVER)
        track = resolve(Track.from_pair(Tag.ERROR, 3), lambda x: ok(x * 2), options)
        assert track.terminate() == (Tag.OK, 6)

    def test_hold_pins_tag(self):
        options = StepOptions(control=Control.HOLD)
        track = resolve(Track.of(1), lambda _: error("ignored"), options)
        assert track.terminate() == (Tag.OK, "ignored")

    def test_result_carries_configured_name(self):
        track = resolve(Track.of(1), lambda x: ok(x), StepOptions(name="same"))
        assert track.history[-1] == Result(Tag.OK, "same", 1)


# ═══════════════════════════════════════════════════════════════
# 6. Memorize & persistence
# ═══════════════════════════════════════════════════════════════


class TestMemorizeResult:
    def test_keeps_tag_and_stores_value(self, failed):
        track = memorize_result(failed, "reason", "sword")
        assert track.current == Result(Tag.ERROR, "reason", "sword")
        assert len(track.history) == 1

    def test_input_track_is_untouched(self):
        seed = Track.of(1)
        after = resolve(seed, lambda x: ok(x + 1), StepOptions())
        assert seed.history == ()
        assert seed.value == 1
        assert after.value == 2


# ═══════════════════════════════════════════════════════════════
# 7. Logging
# ═══════════════════════════════════════════════════════════════


class TestLogEvents:
    def test_skip_is_logged_at_debug(self, failed, recorder):
        with capture_logs() as logs:
            resolve(failed, recorder, run_options("late"))
        assert {"event": "step.skipped", "step": "late", "tag": "error", "track_filter": "ok", "log_level": "debug"} in logs

    def test_trapped_exception_is_logged_as_warning(self):
        with capture_logs() as logs:
            resolve(Track.of("x"), _crashy_uppercase, StepOptions(trap_exceptions=True))
        events = [e for e in logs if e["event"] == "step.exception_trapped"]
        assert len(events) == 1
        assert events[0]["log_level"] == "warning"
        assert "argh x" in events[0]["error"]

    def test_missing_memory_is_logged(self, facts, recorder):
        with capture_logs() as logs:
            resolve(facts, recorder, run_options(using=["hats"]))
        assert any(
            e["event"] == "step.input_unavailable" and e["code"] == "memory_not_found" for e in logs
        )
