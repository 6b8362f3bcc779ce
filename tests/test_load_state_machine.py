"""Tests for LoadStateMachine: score deltas, dwell gating, state, decay and focus mode."""

import pytest

from readload.inference.load_state_machine import LoadState, LoadStateMachine, SessionMetrics
from readload.inference.signal_classifier import ScrollIntensity


@pytest.fixture()
def machine(clock):
    return LoadStateMachine(clock=clock)


def _drive_to(machine: LoadStateMachine, target: float) -> None:
    """Raise the score with hesitations (+1.0 each) until it reaches target."""
    while machine.score < target:
        machine.report_hesitation()


class TestScrollUp:
    @pytest.mark.parametrize("intensity, delta, rereads", [
        ("small", 0.5, 1),
        ("medium", 1.0, 2),
        ("large", 2.0, 3),
    ])
    def test_delta_and_reread_count(self, machine, intensity, delta, rereads):
        assert machine.report_scroll_up(intensity) == rereads
        assert machine.score == pytest.approx(20 + delta)

    def test_score_is_sum_of_deltas_and_clamped(self, machine):
        seq = ["large", "small", "medium"] * 30
        total_rereads = sum(machine.report_scroll_up(i) for i in seq)
        assert total_rereads == 30 * (3 + 1 + 2)
        assert machine.score == 100.0

    def test_sets_behavioral_confirmation(self, machine):
        assert not machine.behavioral_confirmation
        machine.report_scroll_up(ScrollIntensity.SMALL)
        assert machine.behavioral_confirmation


class TestRelativeTime:
    def test_zero_expected_is_neutral_noop(self, machine):
        v = machine.report_relative_time(30, 0, "u1", False)
        assert (v.is_strain, v.is_high_effort, v.is_skimmed) == (False, False, False)
        assert machine.score == 20.0

    def test_skim_ratio_leaves_score(self, machine):
        v = machine.report_relative_time(5, 10, "u1", False)
        assert v.is_skimmed
        assert machine.score == 20.0

    def test_steady_exit_lowers_score_and_clears_confirmation(self, machine):
        machine.report_hesitation()
        v = machine.report_relative_time(10, 10, "u1", False)
        assert not (v.is_strain or v.is_high_effort or v.is_skimmed)
        assert machine.score == pytest.approx(20.0)
        assert not machine.behavioral_confirmation

    def test_periodic_steady_does_not_lower_score(self, machine):
        machine.report_relative_time(10, 10, "u1", True)
        assert machine.score == 20.0

    def test_high_effort_streak_only_counts_exits(self, machine):
        machine.report_relative_time(14, 10, "u1", True)
        assert machine.high_effort_streak == 0
        machine.report_relative_time(14, 10, "u1", False)
        assert machine.high_effort_streak == 1
        assert machine.score == pytest.approx(21.0)

    def test_periodic_reports_on_same_unit_count_once(self, machine):
        for _ in range(5):
            machine.report_relative_time(14, 10, "u1", True)
        assert machine.score == pytest.approx(20.5)

    def test_crossing_into_strain_counts_again(self, machine):
        machine.report_relative_time(14, 10, "u1", True)   # high-effort, +0.5
        machine.report_relative_time(15, 10, "u1", True)   # same band, ignored
        machine.report_relative_time(17, 10, "u1", True)   # crossed 1.6, +1.0
        machine.report_relative_time(20, 10, "u1", True)   # same band, ignored
        assert machine.score == pytest.approx(21.5)

    def test_new_unit_counts_even_when_periodic(self, machine):
        machine.report_relative_time(17, 10, "u1", True)
        machine.report_relative_time(17, 10, "u2", True)
        assert machine.score == pytest.approx(22.0)

    def test_terminal_report_resets_bookkeeping(self, machine):
        machine.report_relative_time(17, 10, "u1", True)    # +1.0
        machine.report_relative_time(17, 10, "u1", False)   # terminal, +1.0
        machine.report_relative_time(17, 10, "u1", True)    # new again after reset, +1.0
        assert machine.score == pytest.approx(23.0)

    def test_anonymous_periodic_reports_always_count(self, machine):
        for _ in range(3):
            machine.report_relative_time(17, 10, None, True)
        assert machine.score == pytest.approx(23.0)

    def test_strain_verdict_needs_corroboration(self, machine):
        v = machine.report_relative_time(20, 10, "u1", False)
        assert not v.is_strain
        machine.report_scroll_up("small")
        v = machine.report_relative_time(20, 10, "u1", False)
        assert v.is_strain

    def test_strain_verdict_from_high_effort_streak(self, machine):
        machine.report_relative_time(14, 10, "u1", False)
        machine.report_relative_time(14, 10, "u2", False)
        v = machine.report_relative_time(20, 10, "u3", False)
        assert v.is_strain


class TestLoadState:
    def test_initial_state_is_steady(self, machine):
        assert machine.state is LoadState.STEADY

    def test_high_effort_band(self, machine):
        while machine.score < 35:
            machine.report_relative_time(20, 10, None, False)
        assert machine.state is LoadState.HIGH_EFFORT

    def test_dwell_alone_never_declares_strain(self, machine):
        for _ in range(100):
            machine.report_relative_time(20, 10, "u1", False)
        assert machine.score == 100.0
        assert machine.state is LoadState.HIGH_EFFORT

    def test_strain_with_confirmation(self, machine):
        _drive_to(machine, 65)
        assert machine.state is LoadState.STRAIN

    def test_steady_exit_drops_strain_to_high_effort(self, machine):
        _drive_to(machine, 70)
        machine.report_relative_time(10, 10, "u1", False)
        assert machine.state is LoadState.HIGH_EFFORT


class TestTick:
    def test_no_tick_while_not_running(self, machine):
        machine.tick()
        m = machine.metrics()
        assert m.active_session_seconds == 0
        assert machine.score == 20.0

    def test_steady_decay_and_bookkeeping(self, machine):
        machine.start_session()
        machine.tick()
        m = machine.metrics()
        assert m.score == pytest.approx(20 * 0.99)
        assert m.active_session_seconds == 1
        assert m.cumulative_time_in_state[LoadState.STEADY] == 1

    def test_elevated_decay_is_slower(self, machine):
        _drive_to(machine, 40)
        before = machine.score
        machine.start_session()
        machine.tick()
        assert machine.score == pytest.approx(before * 0.995)
        assert machine.metrics().cumulative_time_in_state[LoadState.HIGH_EFFORT] == 1

    def test_sustained_strain_counts_then_resets(self, machine):
        _drive_to(machine, 80)
        machine.start_session()
        for _ in range(3):
            machine.tick()
        assert machine.metrics().sustained_strain_seconds == 3
        machine.report_relative_time(10, 10, "u1", False)   # clears confirmation
        machine.tick()
        assert machine.metrics().sustained_strain_seconds == 0

    def test_pause_stops_ticks_without_rollback(self, machine):
        machine.start_session()
        machine.tick()
        machine.pause_session()
        machine.tick()
        m = machine.metrics()
        assert m.active_session_seconds == 1
        assert not m.session_running


class TestFocusMode:
    def test_enters_at_70_and_counts(self, machine):
        _drive_to(machine, 70)
        m = machine.metrics()
        assert m.focus_mode_active
        assert m.focus_mode_activation_count == 1

    def test_hysteresis_requires_25s_of_smooth_reading(self, machine, clock):
        _drive_to(machine, 70)
        machine.report_smooth_reading()                 # starts the run, score 69
        clock.advance(24)
        while machine.score > 50:
            machine.report_smooth_reading()
        assert machine.score <= 50
        assert machine.metrics().focus_mode_active

        clock.advance(1)
        machine.report_smooth_reading()
        assert not machine.metrics().focus_mode_active

    def test_stays_on_between_51_and_69(self, machine, clock):
        _drive_to(machine, 70)
        machine.report_smooth_reading()
        clock.advance(60)
        machine.report_smooth_reading()
        assert 51 <= machine.score <= 69
        assert machine.metrics().focus_mode_active

    def test_scroll_up_cancels_smooth_run(self, machine, clock):
        _drive_to(machine, 70)
        machine.report_smooth_reading()
        clock.advance(30)
        machine.report_scroll_up("small")
        while machine.score > 50:
            machine.report_smooth_reading()          # restarts the run
        assert machine.metrics().focus_mode_active

    def test_unchanged_score_does_not_reevaluate(self, machine, clock):
        _drive_to(machine, 70)
        machine.report_smooth_reading()
        while machine.score > 0:
            machine.report_smooth_reading()
        assert machine.metrics().focus_mode_active     # run shorter than 25 s
        clock.advance(30)
        machine.report_smooth_reading()                 # clamped at 0, no change
        assert machine.metrics().focus_mode_active
        machine.report_hesitation()
        assert not machine.metrics().focus_mode_active

    def test_reactivation_counts_again(self, machine, clock):
        _drive_to(machine, 70)
        machine.report_smooth_reading()
        clock.advance(25)
        while machine.metrics().focus_mode_active:
            machine.report_smooth_reading()
        _drive_to(machine, 70)
        assert machine.metrics().focus_mode_activation_count == 2


class TestMetricsSnapshot:
    def test_state_is_derived_on_read(self, machine):
        _drive_to(machine, 40)
        assert machine.metrics().state is LoadState.HIGH_EFFORT
        assert not hasattr(machine._metrics, "state")


class TestReset:
    def test_reset_restores_defaults(self, machine):
        _drive_to(machine, 80)
        machine.start_session()
        machine.tick()
        machine.reset_session()
        assert machine.metrics() == SessionMetrics()
        assert not machine.behavioral_confirmation
        assert machine.high_effort_streak == 0

    def test_reset_is_idempotent(self, machine):
        machine.report_scroll_up("large")
        machine.reset_session()
        once = machine.metrics()
        machine.reset_session()
        assert machine.metrics() == once
