"""Qt UI constants used across the admin console."""

WINDOW_TITLE: str = "Exam Portal Admin Console"
LOGIN_DIALOG_TITLE: str = "Administrator Login"
LOGIN_FAILED_MESSAGE: str = "Invalid username or password"
CANDIDATE_URL_PLACEHOLDER: str = "http://<server-ip>:8000/"
REFRESH_INTERVAL_MS: int = 5000

ADD_SUBJECT_BUTTON: str = "Add Subject"
DELETE_SUBJECT_BUTTON: str = "Delete Subject"
IMPORT_BUTTON: str = "Import Questions (JSON)"
EXPORT_BUTTON: str = "Export Questions"
REFRESH_BUTTON: str = "Refresh"
SUBJECT_NAME_PLACEHOLDER: str = "Subject name..."
SUBJECTS_HEADER_TEMPLATE: str = "Subjects ({count})"
ATTEMPTS_HEADER: str = "Recent attempts"
NO_SUBJECTS_MESSAGE: str = "No subjects yet"
NO_SUBJECT_SELECTED_MESSAGE: str = "Please select a subject first."

IMPORT_DIALOG_TITLE: str = "Select question bank"
IMPORT_FILE_FILTER: str = "Question banks (*.json);;All files (*.*)"
EXPORT_DIALOG_TITLE: str = "Export question bank"
EXPORT_FILE_FILTER: str = "Question banks (*.json);;All files (*.*)"
