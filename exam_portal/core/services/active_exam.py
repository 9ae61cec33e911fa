"""Lifecycle scope owning one exam session, its timers and its integrity monitor."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging

from exam_portal.core.identity import UserIdentity
from exam_portal.core.models import Subject
from exam_portal.core.services.exam_session import ExamSession
from exam_portal.core.services.exam_timers import ExamTimers
from exam_portal.core.services.integrity_monitor import IntegrityMonitor, IntegrityWarning

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ActiveExam:
    """Everything that lives exactly as long as one candidate's exam page."""

    session_id: str
    subject: Subject
    owner: UserIdentity
    session: ExamSession
    timers: ExamTimers
    monitor: IntegrityMonitor
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    closed: bool = False

    def owned_by(self, identity: UserIdentity | None) -> bool:
        return identity is not None and identity.user_id == self.owner.user_id

    def report_visibility(self, visible: bool) -> IntegrityWarning | None:
        warning = self.monitor.report_visibility(visible)
        self._apply_integrity_outcome()
        return warning

    def report_window_size(
        self,
        outer_width: int,
        inner_width: int,
        outer_height: int,
        inner_height: int,
    ) -> IntegrityWarning | None:
        warning = self.monitor.report_window_size(outer_width, inner_width, outer_height, inner_height)
        self._apply_integrity_outcome()
        return warning

    def close(self) -> None:
        """Deregister both timers. Every exit path must call this."""
        if self.closed:
            return
        self.timers.cancel()
        self.closed = True
        logger.info("Closed exam session %s (%s)", self.session_id, self.session.phase.value)

    def snapshot(self) -> dict[str, object]:
        state = self.session.snapshot()
        warning = self.monitor.current_warning
        state.update(
            {
                "session_id": self.session_id,
                "subject": {"name": self.subject.name, "slug": self.subject.slug},
                "integrity": {
                    "state": self.monitor.state.value,
                    "warning_count": self.monitor.warning_count,
                    "warning": warning.to_dict() if warning else None,
                },
            }
        )
        return state

    def _apply_integrity_outcome(self) -> None:
        if self.monitor.terminated and not self.closed:
            self.session.terminate()
            self.close()
