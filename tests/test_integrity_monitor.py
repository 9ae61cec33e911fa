from __future__ import annotations

from exam_portal.constants.exam_constants import CHEATING_REDIRECT_URL, TERMINATION_REDIRECT_DELAY_MS
from exam_portal.core.services.integrity_monitor import (
    IntegrityMonitor,
    IntegrityState,
    VisibilityDetector,
    WindowDimensionDetector,
)


def _monitor(clock) -> IntegrityMonitor:
    return IntegrityMonitor(visibility_detector=VisibilityDetector(debounce_seconds=3.0, clock=clock))


def test_visibility_counts_only_hidden_transitions(clock):
    detector = VisibilityDetector(clock=clock)
    assert detector.observe(True) is False
    assert detector.observe(False) is True
    assert detector.observe(False) is False
    clock.advance(10)
    assert detector.observe(True) is False
    assert detector.observe(False) is True


def test_visibility_debounces_rapid_toggles(clock):
    detector = VisibilityDetector(debounce_seconds=3.0, clock=clock)
    assert detector.observe(False) is True
    clock.advance(1)
    detector.observe(True)
    assert detector.observe(False) is False
    clock.advance(2.5)
    detector.observe(True)
    assert detector.observe(False) is True


def test_window_detector_is_edge_triggered():
    detector = WindowDimensionDetector(threshold_px=200)
    assert detector.sample(1200, 1100, 900, 800) is False
    assert detector.sample(1200, 900, 900, 800) is True
    assert detector.panel_open is True
    assert detector.sample(1200, 900, 900, 800) is False
    assert detector.sample(1200, 1190, 900, 890) is False
    assert detector.panel_open is False
    assert detector.sample(1200, 1190, 900, 600) is True


def test_first_violation_is_dismissible_warning(clock):
    monitor = _monitor(clock)
    warning = monitor.report_visibility(False)

    assert warning is not None
    assert warning.count == 1
    assert warning.dismissible is True
    assert warning.final is False
    assert warning.redirect_url is None
    assert monitor.state is IntegrityState.WARNED
    assert monitor.dismiss_warning() is True
    assert monitor.current_warning is None


def test_second_violation_terminates(clock):
    monitor = _monitor(clock)
    monitor.report_visibility(False)
    warning = monitor.report_window_size(1600, 1000, 900, 880)

    assert warning.count == 2
    assert warning.dismissible is False
    assert warning.final is True
    assert warning.redirect_url == CHEATING_REDIRECT_URL
    assert warning.redirect_after_ms == TERMINATION_REDIRECT_DELAY_MS
    assert monitor.terminated
    assert monitor.dismiss_warning() is False
    assert monitor.current_warning is warning


def test_no_further_warnings_after_termination(clock):
    monitor = _monitor(clock)
    monitor.report_visibility(False)
    clock.advance(5)
    monitor.report_visibility(True)
    monitor.report_visibility(False)
    assert monitor.terminated

    clock.advance(5)
    monitor.report_visibility(True)
    assert monitor.report_visibility(False) is None
    assert monitor.report_window_size(2000, 100, 2000, 100) is None
    assert monitor.warning_count == 2
