"""Business logic shared between the candidate API and the admin console."""

from __future__ import annotations

from pathlib import Path
import logging
from threading import Lock
import time
from typing import Callable
from uuid import uuid4

from exam_portal.constants.exam_constants import (
    MARKS_PER_ANSWER,
    NOT_AUTHENTICATED_MESSAGE,
    SECONDS_PER_QUESTION,
    TIMER_TICK_SECONDS,
)
from exam_portal.core.bank_exporter import save_question_bank
from exam_portal.core.bank_importer import ImportReport, import_question_bank, load_question_bank
from exam_portal.core.identity import AdminRequiredError, PortalContext
from exam_portal.core.models import Attempt, Question, Subject
from exam_portal.core.services.active_exam import ActiveExam
from exam_portal.core.services.exam_session import ExamSession
from exam_portal.core.services.exam_timers import ExamTimers
from exam_portal.core.services.integrity_monitor import IntegrityMonitor
from exam_portal.core.services.question_repository import QuestionRepository
from exam_portal.core.services.result_view import ResultRenderer, ResultTransferCache, ResultView
from exam_portal.core.services.submission import (
    ExamSubmitter,
    NotAuthenticatedError,
    PendingSubmission,
    SubmissionError,
    SubmissionReceipt,
)
from exam_portal.storage.backend import PortalBackend

logger = logging.getLogger(__name__)

# Finished exams (terminated, expired or closed) stay readable for this long.
_CLOSED_EXAM_GRACE_SECONDS = 60.0


class ExamNotFoundError(LookupError):
    """Raised when a session id is unknown or belongs to someone else."""


class ExamManager:
    """Facade for portal services: Repository, Sessions, Submission, Results and Admin.

    Methods that touch a live ``ExamSession`` must run on the event loop that
    owns the session timers. Backend-only steps (``load_exam`` and
    ``persist_submission``) may run on any thread.
    """

    def __init__(
        self,
        backend: PortalBackend,
        *,
        seconds_per_question: int = SECONDS_PER_QUESTION,
        marks_per_answer: int = MARKS_PER_ANSWER,
        tick_seconds: float = TIMER_TICK_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._lock = Lock()
        self._backend = backend
        self._seconds_per_question = seconds_per_question
        self._marks_per_answer = marks_per_answer
        self._tick_seconds = tick_seconds
        self._clock = clock

        # Services
        self._repository = QuestionRepository(backend)
        self._result_cache = ResultTransferCache()
        self._submitter = ExamSubmitter(backend, self._result_cache)
        self._results = ResultRenderer(backend, self._result_cache)

        self._exams: dict[str, ActiveExam] = {}
        self._finished_at: dict[str, float] = {}

    # --- Repository Delegation ---

    def list_subjects(self) -> list[Subject]:
        return self._repository.list_subjects()

    # --- Exam Sessions ---

    def load_exam(self, subject_slug: str, context: PortalContext) -> tuple[Subject, list[Question]]:
        """Fetch the subject's questions for a candidate. Blocking backend I/O."""
        if context.identity is None:
            raise NotAuthenticatedError(NOT_AUTHENTICATED_MESSAGE)
        return self._repository.load_exam_questions(subject_slug)

    def open_exam(self, subject: Subject, questions: list[Question], context: PortalContext) -> ActiveExam:
        """Start a fresh session with running timers on the current event loop."""
        identity = context.identity
        if identity is None:
            raise NotAuthenticatedError(NOT_AUTHENTICATED_MESSAGE)

        session = ExamSession(seconds_per_question=self._seconds_per_question)
        session.initialize(
            questions,
            total_time=len(questions) * self._seconds_per_question,
            marks_per_answer=self._marks_per_answer,
        )
        session_id = uuid4().hex
        active = ActiveExam(
            session_id=session_id,
            subject=subject,
            owner=identity,
            session=session,
            timers=ExamTimers(
                session,
                tick_seconds=self._tick_seconds,
                on_time_expired=lambda: self._mark_finished(session_id),
            ),
            monitor=IntegrityMonitor(),
        )

        with self._lock:
            self._prune_finished()
            # Re-entering a subject page replaces the candidate's previous session for it.
            for existing in list(self._exams.values()):
                if existing.owned_by(identity) and existing.subject.slug == subject.slug:
                    self._discard(existing)
            self._exams[session_id] = active

        active.timers.start()
        logger.info(
            "Started exam %s on '%s' for %s (%d questions)",
            session_id,
            subject.slug,
            identity.user_id,
            len(questions),
        )
        return active

    def start_exam(self, subject_slug: str, context: PortalContext) -> ActiveExam:
        subject, questions = self.load_exam(subject_slug, context)
        return self.open_exam(subject, questions, context)

    def get_exam(self, session_id: str, context: PortalContext) -> ActiveExam:
        with self._lock:
            active = self._exams.get(session_id)
        if active is None or not active.owned_by(context.identity):
            raise ExamNotFoundError("Exam session not found")
        return active

    def begin_submission(self, active: ActiveExam, context: PortalContext) -> PendingSubmission:
        return self._submitter.begin(active.session, active.subject.slug, context)

    def persist_submission(self, pending: PendingSubmission) -> SubmissionReceipt:
        """Write the attempt and its answers. Blocking backend I/O; never touches the session."""
        return self._submitter.persist(pending)

    def fail_submission(self, active: ActiveExam, error: SubmissionError) -> None:
        active.session.fail_submission(str(error))

    def complete_submission(self, active: ActiveExam) -> None:
        active.session.complete_submission()
        with self._lock:
            self._discard(active)

    def submit_exam(self, session_id: str, context: PortalContext) -> SubmissionReceipt:
        """Submit in one call, all on the current thread."""
        active = self.get_exam(session_id, context)
        receipt = self._submitter.submit(active.session, active.subject.slug, context)
        with self._lock:
            self._discard(active)
        return receipt

    def leave_exam(self, session_id: str, context: PortalContext) -> None:
        """Tear down a session whose page is going away, without persisting anything."""
        active = self.get_exam(session_id, context)
        with self._lock:
            self._discard(active)

    def active_exam_count(self) -> int:
        with self._lock:
            self._prune_finished()
            return sum(1 for active in self._exams.values() if active.session.is_active and not active.closed)

    def shutdown(self) -> None:
        with self._lock:
            for active in list(self._exams.values()):
                self._discard(active)
            self._exams.clear()
            self._finished_at.clear()

    # --- Results ---

    def load_result(self, attempt_id: str, context: PortalContext | None = None) -> ResultView:
        user_id = context.identity.user_id if context and context.identity else None
        return self._results.load(attempt_id, user_id=user_id)

    # --- Admin ---

    def create_subject(self, name: str, context: PortalContext) -> Subject:
        self._require_admin(context)
        subject = self._backend.create_subject(name)
        logger.info("Subject '%s' created by %s", subject.slug, context.role)
        return subject

    def delete_subject(self, subject_id: int, context: PortalContext) -> None:
        self._require_admin(context)
        self._backend.delete_subject(subject_id)
        logger.info("Subject %d deleted by %s", subject_id, context.role)

    def import_question_bank(self, subject_id: int, file_path: Path, context: PortalContext) -> ImportReport:
        self._require_admin(context)
        bank = load_question_bank(file_path)
        return import_question_bank(self._backend, subject_id, bank)

    def export_question_bank(self, subject_id: int, file_path: Path, context: PortalContext) -> int:
        self._require_admin(context)
        questions = self._backend.fetch_questions(subject_id)
        save_question_bank(file_path, questions)
        return len(questions)

    def recent_attempts(
        self,
        context: PortalContext,
        subject_slug: str | None = None,
        limit: int = 50,
    ) -> list[Attempt]:
        self._require_admin(context)
        return self._backend.list_attempts(subject=subject_slug, limit=limit)

    @staticmethod
    def _require_admin(context: PortalContext) -> None:
        if not context.is_admin:
            raise AdminRequiredError("Administrator access required")

    def _mark_finished(self, session_id: str) -> None:
        with self._lock:
            self._finished_at.setdefault(session_id, self._clock())

    def _discard(self, active: ActiveExam) -> None:
        active.close()
        self._exams.pop(active.session_id, None)
        self._finished_at.pop(active.session_id, None)

    def _prune_finished(self) -> None:
        now = self._clock()
        for session_id, active in list(self._exams.items()):
            if active.session.is_submitting or (active.session.is_active and not active.closed):
                continue
            finished_at = self._finished_at.setdefault(session_id, now)
            if now - finished_at >= _CLOSED_EXAM_GRACE_SECONDS:
                logger.info("Pruning finished exam %s (%s)", session_id, active.session.phase.value)
                self._discard(active)
