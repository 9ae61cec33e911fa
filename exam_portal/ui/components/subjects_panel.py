"""Component listing subjects with add and delete controls."""

from __future__ import annotations

from typing import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from exam_portal.constants.ui_constants import (
    ADD_SUBJECT_BUTTON,
    DELETE_SUBJECT_BUTTON,
    NO_SUBJECT_SELECTED_MESSAGE,
    NO_SUBJECTS_MESSAGE,
    SUBJECT_NAME_PLACEHOLDER,
    SUBJECTS_HEADER_TEMPLATE,
)
from exam_portal.core.exam_manager import ExamManager
from exam_portal.core.identity import PortalContext
from exam_portal.core.models import Subject
from exam_portal.core.services.exam_session import ExamFetchError
from exam_portal.storage.backend import BackendError
from exam_portal.ui.dialog_helpers import confirm_delete_subject, show_error, show_warning


class SubjectsPanel(QWidget):
    """UI component for managing the subject catalogue."""

    def __init__(
        self,
        exam_manager: ExamManager,
        admin_context: PortalContext,
        on_selection_changed: Callable[[Subject | None], None],
        parent: QWidget | None = None
    ) -> None:
        super().__init__(parent)
        self.exam_manager = exam_manager
        self.admin_context = admin_context
        self.on_selection_changed = on_selection_changed
        self._subjects: list[Subject] = []
        self._snapshot: list[tuple[int, str, int]] = []

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.header_label = QLabel(SUBJECTS_HEADER_TEMPLATE.format(count=0), self)
        layout.addWidget(self.header_label)

        self.subject_list = QListWidget(self)
        self.subject_list.setAlternatingRowColors(True)
        self.subject_list.currentRowChanged.connect(self._handle_row_changed)
        layout.addWidget(self.subject_list, stretch=1)

        self.empty_label = QLabel(NO_SUBJECTS_MESSAGE, self)
        self.empty_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.empty_label)

        add_row = QHBoxLayout()
        self.name_input = QLineEdit(self)
        self.name_input.setPlaceholderText(SUBJECT_NAME_PLACEHOLDER)
        self.name_input.returnPressed.connect(self._handle_add_subject)
        add_row.addWidget(self.name_input, stretch=1)

        self.add_button = QPushButton(ADD_SUBJECT_BUTTON, self)
        self.add_button.clicked.connect(self._handle_add_subject)
        add_row.addWidget(self.add_button)
        layout.addLayout(add_row)

        self.delete_button = QPushButton(DELETE_SUBJECT_BUTTON, self)
        self.delete_button.clicked.connect(self._handle_delete_subject)
        layout.addWidget(self.delete_button)

    def selected_subject(self) -> Subject | None:
        row = self.subject_list.currentRow()
        if 0 <= row < len(self._subjects):
            return self._subjects[row]
        return None

    def refresh_subjects(self) -> None:
        try:
            subjects = self.exam_manager.list_subjects()
        except ExamFetchError as exc:
            self.header_label.setText(str(exc))
            return
        snapshot = [(subject.id, subject.name, subject.question_count) for subject in subjects]
        if snapshot == self._snapshot:
            return

        selected = self.selected_subject()
        self._snapshot = snapshot
        self._subjects = subjects
        self.subject_list.blockSignals(True)
        self.subject_list.clear()
        for subject in subjects:
            QListWidgetItem(f"{subject.name}  ({subject.question_count} questions)  /exam/{subject.slug}", self.subject_list)
        if selected is not None:
            for row, subject in enumerate(subjects):
                if subject.id == selected.id:
                    self.subject_list.setCurrentRow(row)
                    break
        self.subject_list.blockSignals(False)

        self.header_label.setText(SUBJECTS_HEADER_TEMPLATE.format(count=len(subjects)))
        self.empty_label.setVisible(not subjects)
        self.on_selection_changed(self.selected_subject())

    def _handle_row_changed(self, _row: int) -> None:
        self.on_selection_changed(self.selected_subject())

    def _handle_add_subject(self) -> None:
        name = self.name_input.text().strip()
        if not name:
            return
        try:
            self.exam_manager.create_subject(name, self.admin_context)
        except ValueError as exc:
            show_warning(self, "Subject rejected", str(exc))
            return
        except BackendError as exc:
            show_error(self, "Add failed", str(exc))
            return
        self.name_input.clear()
        self.refresh_subjects()

    def _handle_delete_subject(self) -> None:
        subject = self.selected_subject()
        if subject is None:
            show_warning(self, "No subject", NO_SUBJECT_SELECTED_MESSAGE)
            return
        if not confirm_delete_subject(self, subject.name, subject.question_count):
            return
        try:
            self.exam_manager.delete_subject(subject.id, self.admin_context)
        except (ValueError, BackendError) as exc:
            show_error(self, "Delete failed", str(exc))
            return
        self.refresh_subjects()
