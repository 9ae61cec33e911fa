"""Qt UI components for the admin console."""

from .admin_login_dialog import AdminLoginDialog
from .admin_main_window import AdminMainWindow
from .dialog_helpers import (
    confirm_delete_subject,
    show_error,
    show_info,
    show_warning,
)

__all__ = [
    "AdminLoginDialog",
    "AdminMainWindow",
    "confirm_delete_subject",
    "show_error",
    "show_info",
    "show_warning",
]
