"""Static metadata describing the exam portal."""

APP_NAME = "Exam Portal"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "Exam Portal runs timed multiple-choice exams in the browser. "
    "Administrators manage subjects and question banks from this console; "
    "candidates sign in from the web and take one exam per subject visit."
)

HELP_TEXT = (
    "Create a subject, select it, then import a question bank in JSON format:\n\n"
    '{ "questions": [\n'
    '  { "question": "What is 2 + 2?", "options": ["3", "4", "5"], "correctIndex": 1 },\n'
    '  { "question": "Capital of France?", "options": ["Paris", "Rome"], "correctIndex": 0,\n'
    '    "comprehension": "Optional passage shown with the question." }\n'
    "] }\n\n"
    "Records with empty text, fewer than two options or an out-of-range "
    "correctIndex are skipped; the rest of the file is still imported."
)
