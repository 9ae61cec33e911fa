"""Tab-switch and inspection-panel heuristics with escalating warnings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
import time
from typing import Callable

from exam_portal.constants.exam_constants import (
    CHEATING_REDIRECT_URL,
    DEVTOOLS_THRESHOLD_PX,
    MAX_INTEGRITY_WARNINGS,
    TERMINATION_REDIRECT_DELAY_MS,
    VISIBILITY_DEBOUNCE_SECONDS,
)

logger = logging.getLogger(__name__)


class IntegrityState(str, Enum):
    CLEAN = "clean"
    WARNED = "warned"
    TERMINATED = "terminated"


@dataclass(slots=True, frozen=True)
class IntegrityWarning:
    """Warning shown to the candidate after a violation."""

    count: int
    dismissible: bool
    final: bool
    title: str
    message: str
    redirect_url: str | None = None
    redirect_after_ms: int | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "count": self.count,
            "dismissible": self.dismissible,
            "final": self.final,
            "title": self.title,
            "message": self.message,
            "redirect_url": self.redirect_url,
            "redirect_after_ms": self.redirect_after_ms,
        }


class VisibilityDetector:
    """Counts visible -> hidden transitions, at most once per debounce window."""

    def __init__(
        self,
        debounce_seconds: float = VISIBILITY_DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._last_visible: bool = True
        self._last_violation_at: float | None = None

    def observe(self, visible: bool) -> bool:
        """Record a visibility change; return True when it counts as a violation."""
        was_visible = self._last_visible
        self._last_visible = visible
        if visible or not was_visible:
            return False
        now = self._clock()
        if self._last_violation_at is not None and now - self._last_violation_at < self._debounce_seconds:
            return False
        self._last_violation_at = now
        return True


class WindowDimensionDetector:
    """Edge-triggered check of outer/inner window size deltas."""

    def __init__(self, threshold_px: int = DEVTOOLS_THRESHOLD_PX) -> None:
        self._threshold_px = threshold_px
        self._panel_open: bool = False

    @property
    def panel_open(self) -> bool:
        return self._panel_open

    def sample(self, outer_width: int, inner_width: int, outer_height: int, inner_height: int) -> bool:
        """Return True only on the transition into the 'panel open' state."""
        exceeded = (
            outer_width - inner_width > self._threshold_px
            or outer_height - inner_height > self._threshold_px
        )
        if not exceeded:
            self._panel_open = False
            return False
        if self._panel_open:
            return False
        self._panel_open = True
        return True


class IntegrityMonitor:
    """Feeds both detectors into one warning counter: clean -> warned -> terminated."""

    def __init__(
        self,
        *,
        max_warnings: int = MAX_INTEGRITY_WARNINGS,
        visibility_detector: VisibilityDetector | None = None,
        dimension_detector: WindowDimensionDetector | None = None,
    ) -> None:
        self._max_warnings = max_warnings
        self._visibility = visibility_detector or VisibilityDetector()
        self._dimensions = dimension_detector or WindowDimensionDetector()
        self._warning_count: int = 0
        self._current_warning: IntegrityWarning | None = None

    @property
    def warning_count(self) -> int:
        return self._warning_count

    @property
    def state(self) -> IntegrityState:
        if self._warning_count >= self._max_warnings:
            return IntegrityState.TERMINATED
        if self._warning_count > 0:
            return IntegrityState.WARNED
        return IntegrityState.CLEAN

    @property
    def terminated(self) -> bool:
        return self.state is IntegrityState.TERMINATED

    @property
    def current_warning(self) -> IntegrityWarning | None:
        return self._current_warning

    def report_visibility(self, visible: bool) -> IntegrityWarning | None:
        if self.terminated or not self._visibility.observe(visible):
            return None
        return self._escalate("Tab switching detected!")

    def report_window_size(
        self,
        outer_width: int,
        inner_width: int,
        outer_height: int,
        inner_height: int,
    ) -> IntegrityWarning | None:
        if self.terminated:
            return None
        if not self._dimensions.sample(outer_width, inner_width, outer_height, inner_height):
            return None
        return self._escalate("Developer tools detected!")

    def dismiss_warning(self) -> bool:
        """Hide the current warning if it may be dismissed."""
        if self._current_warning is None or not self._current_warning.dismissible:
            return False
        self._current_warning = None
        return True

    def _escalate(self, reason: str) -> IntegrityWarning:
        self._warning_count += 1
        if self._warning_count >= self._max_warnings:
            warning = IntegrityWarning(
                count=self._warning_count,
                dismissible=False,
                final=True,
                title="FINAL WARNING",
                message=(
                    "Multiple violations detected! This behavior is considered a cheating attempt. "
                    "The system will now terminate your session."
                ),
                redirect_url=CHEATING_REDIRECT_URL,
                redirect_after_ms=TERMINATION_REDIRECT_DELAY_MS,
            )
            logger.warning("Integrity violation %d (%s); terminating session", self._warning_count, reason)
        else:
            warning = IntegrityWarning(
                count=self._warning_count,
                dismissible=True,
                final=False,
                title="WARNING",
                message=(
                    f"{reason} Please stay on this tab during the entire examination. "
                    "This is your first and last warning."
                ),
            )
            logger.warning("Integrity violation %d (%s)", self._warning_count, reason)
        self._current_warning = warning
        return warning
