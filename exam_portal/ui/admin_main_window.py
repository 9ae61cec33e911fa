"""Qt main window for subject, question bank and attempt administration."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from exam_portal.constants.about import (
    APP_ABOUT_TEXT,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    HELP_TEXT,
)
from exam_portal.constants.ui_constants import (
    CANDIDATE_URL_PLACEHOLDER,
    EXPORT_BUTTON,
    EXPORT_DIALOG_TITLE,
    EXPORT_FILE_FILTER,
    IMPORT_BUTTON,
    IMPORT_DIALOG_TITLE,
    IMPORT_FILE_FILTER,
    NO_SUBJECT_SELECTED_MESSAGE,
    REFRESH_BUTTON,
    REFRESH_INTERVAL_MS,
    WINDOW_TITLE,
)
from exam_portal.core.bank_importer import QuestionBankImportError
from exam_portal.core.exam_manager import ExamManager
from exam_portal.core.identity import PortalContext
from exam_portal.core.models import Subject
from exam_portal.storage.backend import BackendError
from exam_portal.styling.styles import Styles
from exam_portal.ui.components.attempts_panel import AttemptsPanel
from exam_portal.ui.components.subjects_panel import SubjectsPanel
from exam_portal.ui.dialog_helpers import show_error, show_info, show_warning


class AdminMainWindow(QMainWindow):
    """Main Qt window combining the subject catalogue and attempt history."""

    def __init__(
        self,
        exam_manager: ExamManager,
        admin_context: PortalContext,
        candidate_url: str | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(WINDOW_TITLE)
        self.resize(1000, 640)

        self.exam_manager = exam_manager
        self.admin_context = admin_context
        self.candidate_url = candidate_url or CANDIDATE_URL_PLACEHOLDER
        self._last_export_path: Path | None = None

        self._build_ui()
        self._configure_refresh_timer()
        self.setStyleSheet(Styles.get_main_window_style())
        self._refresh_state()

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self.url_label = QLabel(f"Candidates connect to: {self.candidate_url}", self)
        self.url_label.setStyleSheet(Styles.get_large_label_style())
        self.url_label.setWordWrap(True)
        root_layout.addWidget(self.url_label)

        self.activity_label = QLabel("", self)
        self.activity_label.setStyleSheet(Styles.get_secondary_label_style())
        root_layout.addWidget(self.activity_label)

        self._build_action_buttons(root_layout)

        splitter = QSplitter(self)
        self.subjects_panel = SubjectsPanel(
            self.exam_manager,
            self.admin_context,
            on_selection_changed=self._handle_subject_selected,
            parent=self,
        )
        self.attempts_panel = AttemptsPanel(self.exam_manager, self.admin_context, self)
        splitter.addWidget(self.subjects_panel)
        splitter.addWidget(self.attempts_panel)
        splitter.setStretchFactor(0, 1)
        splitter.setStretchFactor(1, 2)
        root_layout.addWidget(splitter, stretch=1)

    def _build_action_buttons(self, layout: QVBoxLayout) -> None:
        button_row = QHBoxLayout()

        self.import_button = QPushButton(IMPORT_BUTTON, self)
        self.import_button.clicked.connect(self._handle_import_bank)
        button_row.addWidget(self.import_button)

        self.export_button = QPushButton(EXPORT_BUTTON, self)
        self.export_button.clicked.connect(self._handle_export_bank)
        button_row.addWidget(self.export_button)

        self.refresh_button = QPushButton(REFRESH_BUTTON, self)
        self.refresh_button.clicked.connect(self._refresh_state)
        button_row.addWidget(self.refresh_button)

        button_row.addStretch()

        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)

        self.help_button = QPushButton("Help", self)
        self.help_button.clicked.connect(self._handle_help)
        button_row.addWidget(self.help_button)

        layout.addLayout(button_row)

    def _configure_refresh_timer(self) -> None:
        self.refresh_timer = QTimer(self)
        self.refresh_timer.setInterval(REFRESH_INTERVAL_MS)
        self.refresh_timer.timeout.connect(self._refresh_state)
        self.refresh_timer.start()

    def _refresh_state(self) -> None:
        self.subjects_panel.refresh_subjects()
        self.attempts_panel.refresh_attempts()
        self.activity_label.setText(f"Exams in progress: {self.exam_manager.active_exam_count()}")

    def _handle_subject_selected(self, subject: Subject | None) -> None:
        self.attempts_panel.set_subject(subject)
        has_subject = subject is not None
        self.import_button.setEnabled(has_subject)
        self.export_button.setEnabled(has_subject)

    def _require_subject(self) -> Subject | None:
        subject = self.subjects_panel.selected_subject()
        if subject is None:
            show_warning(self, "No subject", NO_SUBJECT_SELECTED_MESSAGE)
        return subject

    def _handle_import_bank(self) -> None:
        subject = self._require_subject()
        if subject is None:
            return

        file_path, _ = QFileDialog.getOpenFileName(
            self,
            IMPORT_DIALOG_TITLE,
            str(Path.home()),
            IMPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            report = self.exam_manager.import_question_bank(subject.id, Path(file_path), self.admin_context)
        except QuestionBankImportError as exc:
            show_error(self, "Import failed", str(exc))
            return

        self._refresh_state()
        message = f"Imported {report.created} questions into '{subject.name}'."
        if report.skipped:
            message += f" {report.skipped} records were skipped; see the log for details."
        show_info(self, "Questions imported", message)

    def _handle_export_bank(self) -> None:
        subject = self._require_subject()
        if subject is None:
            return

        default_path = self._last_export_path or (Path.cwd() / f"{subject.slug}.json")
        file_path, _ = QFileDialog.getSaveFileName(
            self,
            EXPORT_DIALOG_TITLE,
            str(default_path),
            EXPORT_FILE_FILTER,
        )
        if not file_path:
            return

        try:
            count = self.exam_manager.export_question_bank(subject.id, Path(file_path), self.admin_context)
        except (OSError, ValueError, BackendError) as exc:
            show_error(self, "Export failed", str(exc))
            return

        self._last_export_path = Path(file_path)
        show_info(self, "Questions exported", f"Exported {count} questions to {file_path}.")

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def _handle_help(self) -> None:
        show_info(self, f"{APP_NAME} Help", HELP_TEXT)
