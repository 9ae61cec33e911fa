"""Application entry point for the exam portal."""

from __future__ import annotations

import socket
import sys

from PySide6.QtWidgets import QApplication, QDialog

from exam_portal.core.exam_manager import ExamManager
from exam_portal.core.identity import AdminCredentials
from exam_portal.core.settings import PortalSettings
from exam_portal.server.api_server import start_api_server
from exam_portal.storage.backend import PortalBackend
from exam_portal.storage.database import create_database_engine, create_session_factory
from exam_portal.ui.admin_login_dialog import AdminLoginDialog
from exam_portal.ui.admin_main_window import AdminMainWindow
from exam_portal.utils.logging_config import configure_logging


def _determine_candidate_url(port: int) -> str:
    """Best-effort determination of the local IP for the candidate-facing URL."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.connect(("8.8.8.8", 80))
            ip_address = sock.getsockname()[0]
    except OSError:
        ip_address = "127.0.0.1"
    return f"http://{ip_address}:{port}/"


def main() -> None:
    """Initialize logging and storage, start the API server, and launch the admin console."""
    logger = configure_logging()
    settings = PortalSettings()
    logger.info("Starting Exam Portal with database %s", settings.database_url)

    engine = create_database_engine(settings.database_url)
    backend = PortalBackend(create_session_factory(engine))
    exam_manager = ExamManager(backend)

    start_api_server(
        exam_manager=exam_manager,
        secret_key=settings.secret_key,
        host=settings.host,
        port=settings.port,
    )
    candidate_url = _determine_candidate_url(settings.port)
    logger.info("Candidate pages available at %s", candidate_url)

    app = QApplication(sys.argv)
    credentials = AdminCredentials(settings.admin_username, settings.admin_password)
    login_dialog = AdminLoginDialog(credentials)
    if login_dialog.exec() != QDialog.Accepted or login_dialog.admin_context is None:
        logger.info("Admin login cancelled; shutting down")
        sys.exit(0)

    window = AdminMainWindow(
        exam_manager=exam_manager,
        admin_context=login_dialog.admin_context,
        candidate_url=candidate_url,
    )
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
