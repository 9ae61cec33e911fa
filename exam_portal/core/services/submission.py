"""Scoring of a finished exam session and persistence of the attempt."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import logging
from typing import TYPE_CHECKING

from exam_portal.constants.exam_constants import (
    NOT_AUTHENTICATED_MESSAGE,
    SUBMISSION_FAILED_MESSAGE,
)
from exam_portal.core.identity import PortalContext
from exam_portal.core.models import AnswerRecord, Attempt, Question
from exam_portal.core.services.exam_session import ExamSession
from exam_portal.storage.backend import BackendError, PortalBackend

if TYPE_CHECKING:
    from exam_portal.core.services.result_view import ResultTransferCache

logger = logging.getLogger(__name__)


class SubmissionError(Exception):
    """Raised when an exam cannot be submitted. The flow may be retried."""


class NotAuthenticatedError(SubmissionError):
    """Raised when no candidate identity is available at submission time."""


class AnswerOutcome(str, Enum):
    CORRECT = "correct"
    WRONG = "wrong"
    NOT_ATTENDED = "not_attended"


@dataclass(slots=True, frozen=True)
class GradedQuestion:
    question: Question
    selected_option_id: int | None
    outcome: AnswerOutcome


@dataclass(slots=True, frozen=True)
class ScoreSummary:
    correct: int
    wrong: int
    not_attended: int
    total_questions: int


@dataclass(slots=True, frozen=True)
class SubmissionReceipt:
    attempt: Attempt
    redirect_url: str
    answers_saved: bool


def grade_questions(questions: list[Question], answers: dict[int, int]) -> list[GradedQuestion]:
    """Classify every question, in order, against the answers keyed by question index."""
    graded: list[GradedQuestion] = []
    for index, question in enumerate(questions):
        selected = answers.get(index)
        if selected is None:
            outcome = AnswerOutcome.NOT_ATTENDED
        elif selected == question.correct_option_id:
            outcome = AnswerOutcome.CORRECT
        else:
            outcome = AnswerOutcome.WRONG
        graded.append(GradedQuestion(question=question, selected_option_id=selected, outcome=outcome))
    return graded


def summarize(graded: list[GradedQuestion]) -> ScoreSummary:
    correct = sum(1 for item in graded if item.outcome is AnswerOutcome.CORRECT)
    wrong = sum(1 for item in graded if item.outcome is AnswerOutcome.WRONG)
    return ScoreSummary(
        correct=correct,
        wrong=wrong,
        not_attended=len(graded) - correct - wrong,
        total_questions=len(graded),
    )


def score_answers(questions: list[Question], answers: dict[int, int]) -> ScoreSummary:
    return summarize(grade_questions(questions, answers))


@dataclass(slots=True, frozen=True)
class PendingSubmission:
    """Graded answers captured from a session, ready to be written."""

    user_id: str
    subject_slug: str
    graded: list[GradedQuestion]
    summary: ScoreSummary


class ExamSubmitter:
    """Writes the attempt, then its answer records, then hands results to the cache.

    ``begin`` reads the session and ``persist`` only talks to the backend, so
    the write can run off the thread that owns the session.
    """

    def __init__(self, backend: PortalBackend, result_cache: "ResultTransferCache") -> None:
        self._backend = backend
        self._result_cache = result_cache

    def begin(self, session: ExamSession, subject_slug: str, context: PortalContext) -> PendingSubmission:
        identity = context.identity
        if identity is None:
            session.fail_submission(NOT_AUTHENTICATED_MESSAGE)
            raise NotAuthenticatedError(NOT_AUTHENTICATED_MESSAGE)

        session.begin_submission()
        graded = grade_questions(session.questions, session.answers())
        return PendingSubmission(
            user_id=identity.user_id,
            subject_slug=subject_slug,
            graded=graded,
            summary=summarize(graded),
        )

    def persist(self, pending: PendingSubmission) -> SubmissionReceipt:
        summary = pending.summary
        try:
            attempt = self._backend.create_attempt(
                user_id=pending.user_id,
                subject=pending.subject_slug,
                correct=summary.correct,
                wrong=summary.wrong,
                not_attended=summary.not_attended,
                total_questions=summary.total_questions,
            )
        except BackendError as exc:
            raise SubmissionError(SUBMISSION_FAILED_MESSAGE) from exc

        records = [
            AnswerRecord(
                attempt_id=attempt.id,
                question_id=item.question.id,
                selected_option_id=item.selected_option_id,
            )
            for item in pending.graded
            if item.selected_option_id is not None
        ]
        answers_saved = True
        try:
            self._backend.create_answer_records(records)
        except BackendError:
            # The attempt already holds the score; results still open.
            answers_saved = False
            logger.exception("Failed to save %d answers for attempt %s", len(records), attempt.id)

        self._result_cache.put(attempt.id, pending.graded)
        logger.info(
            "Attempt %s saved for %s: correct=%d wrong=%d not_attended=%d",
            attempt.id,
            pending.subject_slug,
            summary.correct,
            summary.wrong,
            summary.not_attended,
        )
        return SubmissionReceipt(
            attempt=attempt,
            redirect_url=f"/result?attempt_id={attempt.id}",
            answers_saved=answers_saved,
        )

    def submit(self, session: ExamSession, subject_slug: str, context: PortalContext) -> SubmissionReceipt:
        pending = self.begin(session, subject_slug, context)
        try:
            receipt = self.persist(pending)
        except SubmissionError as exc:
            session.fail_submission(str(exc))
            raise
        session.complete_submission()
        return receipt
