"""Credential dialog guarding the admin console."""

from __future__ import annotations

from PySide6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QVBoxLayout,
)

from exam_portal.constants.ui_constants import LOGIN_DIALOG_TITLE, LOGIN_FAILED_MESSAGE
from exam_portal.core.identity import AdminCredentials, PortalContext
from exam_portal.styling.styles import Styles


class AdminLoginDialog(QDialog):
    """Modal dialog that accepts only when the configured admin credentials match."""

    def __init__(self, credentials: AdminCredentials, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle(LOGIN_DIALOG_TITLE)
        self.setModal(True)
        self.setMinimumWidth(360)

        self._credentials = credentials
        self._admin_context: PortalContext | None = None
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        form = QFormLayout()
        self.username_input = QLineEdit(self)
        self.password_input = QLineEdit(self)
        self.password_input.setEchoMode(QLineEdit.Password)
        form.addRow("Username:", self.username_input)
        form.addRow("Password:", self.password_input)
        layout.addLayout(form)

        self.error_label = QLabel("", self)
        self.error_label.setStyleSheet(f"color: {Styles.get_score_color(passed=False)};")
        layout.addWidget(self.error_label)

        if not self._credentials.configured:
            self.error_label.setText(
                "Admin credentials are not configured. "
                "Set EXAM_PORTAL_ADMIN_USERNAME and EXAM_PORTAL_ADMIN_PASSWORD."
            )

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        buttons.accepted.connect(self._handle_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    @property
    def admin_context(self) -> PortalContext | None:
        """The admin context granted by a successful login, if any."""
        return self._admin_context

    def _handle_accept(self) -> None:
        if self._credentials.check(self.username_input.text(), self.password_input.text()):
            self._admin_context = PortalContext(is_admin=True)
            self.accept()
            return
        self.password_input.clear()
        if self._credentials.configured:
            self.error_label.setText(LOGIN_FAILED_MESSAGE)
