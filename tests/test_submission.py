from __future__ import annotations

import pytest

from exam_portal.constants.exam_constants import NOT_AUTHENTICATED_MESSAGE, SUBMISSION_FAILED_MESSAGE
from exam_portal.core.identity import PortalContext
from exam_portal.core.services.exam_session import ExamSession, SessionPhase
from exam_portal.core.services.result_view import ResultTransferCache
from exam_portal.core.services.submission import (
    AnswerOutcome,
    ExamSubmitter,
    NotAuthenticatedError,
    SubmissionError,
    grade_questions,
    score_answers,
)
from exam_portal.storage.backend import BackendError


def _answered_session(backend) -> ExamSession:
    subject = backend.get_subject_by_slug("general-knowledge")
    questions = backend.fetch_questions(subject.id)
    session = ExamSession()
    session.initialize(questions, total_time=90, marks_per_answer=1)
    # Q1 correct, Q2 wrong, Q3 unanswered.
    session.select_option(questions[0].correct_option_id)
    session.next_question()
    wrong = next(option.id for option in questions[1].options if option.id != questions[1].correct_option_id)
    session.select_option(wrong)
    return session


class FailingAnswersBackend:
    """Delegates to a real backend but fails answer record writes."""

    def __init__(self, backend) -> None:
        self._backend = backend

    def create_attempt(self, **kwargs):
        return self._backend.create_attempt(**kwargs)

    def create_answer_records(self, records):
        raise BackendError("Failed to save answers.")


class FailingAttemptBackend:
    def __init__(self) -> None:
        self.answer_writes = 0

    def create_attempt(self, **kwargs):
        raise BackendError("Failed to save attempt.")

    def create_answer_records(self, records):
        self.answer_writes += 1


def test_grade_questions_classifies_in_order(questions):
    answers = {0: questions[0].correct_option_id, 1: questions[1].options[3].id}
    graded = grade_questions(questions, answers)
    assert [item.outcome for item in graded] == [
        AnswerOutcome.CORRECT,
        AnswerOutcome.WRONG,
        AnswerOutcome.NOT_ATTENDED,
    ]
    summary = score_answers(questions, answers)
    assert (summary.correct, summary.wrong, summary.not_attended, summary.total_questions) == (1, 1, 1, 3)


def test_submit_scores_and_persists(seeded_backend, candidate):
    session = _answered_session(seeded_backend)
    cache = ResultTransferCache()

    receipt = ExamSubmitter(seeded_backend, cache).submit(session, "general-knowledge", candidate)

    attempt = seeded_backend.get_attempt(receipt.attempt.id)
    assert (attempt.correct, attempt.wrong, attempt.not_attended, attempt.total_questions) == (1, 1, 1, 3)
    assert attempt.user_id == candidate.identity.user_id
    assert attempt.subject == "general-knowledge"
    assert receipt.redirect_url == f"/result?attempt_id={attempt.id}"
    assert receipt.answers_saved is True
    assert len(seeded_backend.list_answer_records(attempt.id)) == 2
    assert session.phase is SessionPhase.SUBMITTED
    assert len(cache) == 1


def test_submit_without_identity_creates_nothing(seeded_backend):
    session = _answered_session(seeded_backend)

    with pytest.raises(NotAuthenticatedError, match=NOT_AUTHENTICATED_MESSAGE):
        ExamSubmitter(seeded_backend, ResultTransferCache()).submit(session, "general-knowledge", PortalContext())

    assert seeded_backend.list_attempts() == []
    assert session.submit_error == NOT_AUTHENTICATED_MESSAGE
    assert session.can_submit is True


def test_attempt_failure_aborts_before_answers(seeded_backend, candidate):
    session = _answered_session(seeded_backend)
    backend = FailingAttemptBackend()

    with pytest.raises(SubmissionError, match=SUBMISSION_FAILED_MESSAGE):
        ExamSubmitter(backend, ResultTransferCache()).submit(session, "general-knowledge", candidate)

    assert backend.answer_writes == 0
    assert session.is_submitting is False
    assert session.submit_error == SUBMISSION_FAILED_MESSAGE
    assert session.phase is SessionPhase.ACTIVE


def test_answer_record_failure_is_soft(seeded_backend, candidate, caplog):
    session = _answered_session(seeded_backend)
    cache = ResultTransferCache()

    with caplog.at_level("ERROR"):
        receipt = ExamSubmitter(FailingAnswersBackend(seeded_backend), cache).submit(
            session, "general-knowledge", candidate
        )

    assert receipt.answers_saved is False
    assert seeded_backend.get_attempt(receipt.attempt.id) is not None
    assert session.phase is SessionPhase.SUBMITTED
    assert len(cache) == 1
    assert "Failed to save 2 answers" in caplog.text
