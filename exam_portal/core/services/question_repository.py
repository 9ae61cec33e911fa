"""Client that loads subjects and exam question sets from the backend."""

from __future__ import annotations

import logging

from exam_portal.core.models import Question, Subject
from exam_portal.core.services.exam_session import ExamFetchError
from exam_portal.storage.backend import BackendError, PortalBackend

logger = logging.getLogger(__name__)


class SubjectNotFoundError(ExamFetchError):
    """Raised when no subject matches the requested slug."""


class NoQuestionsError(ExamFetchError):
    """Raised when a subject exists but has no questions."""


class QuestionRepository:
    """Normalizes backend records into the read-only question list of an exam."""

    def __init__(self, backend: PortalBackend) -> None:
        self._backend = backend

    def list_subjects(self) -> list[Subject]:
        try:
            return self._backend.list_subjects()
        except BackendError as exc:
            raise ExamFetchError("Failed to load subjects") from exc

    def load_exam_questions(self, subject_slug: str) -> tuple[Subject, list[Question]]:
        """Return the subject and its numbered questions, or raise ExamFetchError."""
        slug = subject_slug.strip().lower()
        try:
            subject = self._backend.get_subject_by_slug(slug)
            if subject is None:
                raise SubjectNotFoundError("Invalid test selected")
            questions = self._backend.fetch_questions(subject.id)
        except BackendError as exc:
            raise ExamFetchError("Failed to load questions") from exc

        if not questions:
            raise NoQuestionsError("No questions available for this subject")
        logger.info("Loaded %d questions for subject '%s'", len(questions), slug)
        return subject, questions
