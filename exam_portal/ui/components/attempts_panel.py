"""Component showing the most recent attempts for the selected subject."""

from __future__ import annotations

from PySide6.QtGui import QColor
from PySide6.QtWidgets import QLabel, QListWidget, QListWidgetItem, QVBoxLayout, QWidget

from exam_portal.constants.ui_constants import ATTEMPTS_HEADER
from exam_portal.core.exam_manager import ExamManager
from exam_portal.core.identity import PortalContext
from exam_portal.core.models import Subject
from exam_portal.storage.backend import BackendError
from exam_portal.styling.styles import Styles


class AttemptsPanel(QWidget):
    """Read-only list of attempts, newest first."""

    def __init__(
        self,
        exam_manager: ExamManager,
        admin_context: PortalContext,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.exam_manager = exam_manager
        self.admin_context = admin_context
        self._subject: Subject | None = None
        self._snapshot: list[str] = []

        layout = QVBoxLayout()
        self.setLayout(layout)

        self.header_label = QLabel(ATTEMPTS_HEADER, self)
        layout.addWidget(self.header_label)

        self.attempt_list = QListWidget(self)
        layout.addWidget(self.attempt_list, stretch=1)

        self.status_label = QLabel("", self)
        self.status_label.setStyleSheet(Styles.get_secondary_label_style())
        layout.addWidget(self.status_label)

    def set_subject(self, subject: Subject | None) -> None:
        if subject == self._subject:
            return
        self._subject = subject
        self._snapshot = []
        self.refresh_attempts()

    def refresh_attempts(self) -> None:
        if self._subject is None:
            self.attempt_list.clear()
            self.header_label.setText(ATTEMPTS_HEADER)
            self.status_label.setText("Select a subject to see its attempts.")
            return

        try:
            attempts = self.exam_manager.recent_attempts(self.admin_context, self._subject.slug)
        except BackendError as exc:
            self.status_label.setText(str(exc))
            return
        snapshot = [attempt.id for attempt in attempts]
        if snapshot == self._snapshot:
            return
        self._snapshot = snapshot

        self.attempt_list.clear()
        for attempt in attempts:
            total = attempt.total_questions or 1
            percent = attempt.correct / total * 100
            timestamp = attempt.created_at.strftime("%Y-%m-%d %H:%M")
            item = QListWidgetItem(
                f"{timestamp}  {attempt.user_id[:8]}  "
                f"{attempt.correct}/{attempt.total_questions} ({percent:.0f}%)  "
                f"wrong {attempt.wrong}, skipped {attempt.not_attended}",
                self.attempt_list,
            )
            item.setForeground(QColor(Styles.get_score_color(passed=percent >= 50)))
        self.header_label.setText(f"{ATTEMPTS_HEADER}: {self._subject.name}")
        self.status_label.setText(f"{len(attempts)} attempts shown" if attempts else "No attempts yet.")
