"""Reconstruction of per-question results for the review page."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from threading import Lock
import time
from typing import Callable

from exam_portal.constants.exam_constants import RESULT_CACHE_TTL_SECONDS
from exam_portal.core.models import AnswerRecord, Attempt, Question, QuestionOption
from exam_portal.core.services.submission import (
    AnswerOutcome,
    GradedQuestion,
    ScoreSummary,
    grade_questions,
)
from exam_portal.storage.backend import BackendError, PortalBackend

logger = logging.getLogger(__name__)


class ResultNotFoundError(LookupError):
    """Raised when an attempt or its subject cannot be found."""


class ResultTransferCache:
    """Short-lived hand-off of graded questions from submission to the results view.

    Entries expire after the TTL and are consumed by the first read.
    """

    def __init__(
        self,
        ttl_seconds: float = RESULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, list[GradedQuestion]]] = {}
        self._lock = Lock()

    def put(self, attempt_id: str, graded: list[GradedQuestion]) -> None:
        with self._lock:
            self._purge_expired()
            self._entries[attempt_id] = (self._clock() + self._ttl_seconds, list(graded))

    def pop(self, attempt_id: str) -> list[GradedQuestion] | None:
        with self._lock:
            self._purge_expired()
            entry = self._entries.pop(attempt_id, None)
            return entry[1] if entry else None

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired()
            return len(self._entries)

    def _purge_expired(self) -> None:
        now = self._clock()
        expired = [key for key, (deadline, _) in self._entries.items() if deadline <= now]
        for key in expired:
            del self._entries[key]


@dataclass(slots=True, frozen=True)
class ResultQuestionView:
    id: int
    number: int
    question: str
    comprehension: str | None
    image_url: str | None
    options: tuple[QuestionOption, ...]
    correct_option_id: int | None
    selected_option_id: int | None
    correct_option: QuestionOption | None
    selected_option: QuestionOption | None
    status: AnswerOutcome


@dataclass(slots=True, frozen=True)
class ResultView:
    attempt: Attempt
    questions: list[ResultQuestionView]
    source: str

    @property
    def score_percent(self) -> float:
        if self.attempt.total_questions == 0:
            return 0.0
        return round(self.attempt.correct / self.attempt.total_questions * 100, 1)


def recount_from_records(
    records: list[AnswerRecord],
    questions_by_id: dict[int, Question],
    total_questions: int,
) -> ScoreSummary:
    """Recompute an attempt's counts from its answer records alone."""
    correct = sum(
        1
        for record in records
        if record.question_id in questions_by_id
        and questions_by_id[record.question_id].correct_option_id == record.selected_option_id
    )
    wrong = len(records) - correct
    return ScoreSummary(
        correct=correct,
        wrong=wrong,
        not_attended=total_questions - len(records),
        total_questions=total_questions,
    )


class ResultRenderer:
    """Builds result views from the transfer cache when possible, else from the backend."""

    def __init__(self, backend: PortalBackend, cache: ResultTransferCache) -> None:
        self._backend = backend
        self._cache = cache

    def load(self, attempt_id: str, user_id: str | None = None) -> ResultView:
        """Load an attempt's results. With ``user_id``, other candidates' attempts are hidden."""
        try:
            attempt = self._backend.get_attempt(attempt_id)
        except BackendError as exc:
            raise ResultNotFoundError("Failed to load result") from exc
        if attempt is None or (user_id is not None and attempt.user_id != user_id):
            raise ResultNotFoundError("Attempt not found")

        cached = self._cache.pop(attempt_id)
        if cached is not None:
            return ResultView(attempt=attempt, questions=_to_views(cached), source="cache")

        return ResultView(attempt=attempt, questions=self._load_from_backend(attempt), source="backend")

    def _load_from_backend(self, attempt: Attempt) -> list[ResultQuestionView]:
        try:
            subject = self._backend.get_subject_by_slug(attempt.subject)
            if subject is None:
                raise ResultNotFoundError("Subject not found")
            questions = self._backend.fetch_questions(subject.id)
            records = self._backend.list_answer_records(attempt.id)
        except BackendError as exc:
            raise ResultNotFoundError("Failed to load result") from exc

        selected_by_question = {record.question_id: record.selected_option_id for record in records}
        answers = {
            index: selected_by_question[question.id]
            for index, question in enumerate(questions)
            if question.id in selected_by_question
        }
        return _to_views(grade_questions(questions, answers))


def _to_views(graded: list[GradedQuestion]) -> list[ResultQuestionView]:
    views: list[ResultQuestionView] = []
    for item in graded:
        question = item.question
        views.append(
            ResultQuestionView(
                id=question.id,
                number=question.number,
                question=question.prompt,
                comprehension=question.comprehension,
                image_url=question.image_url,
                options=question.options,
                correct_option_id=question.correct_option_id,
                selected_option_id=item.selected_option_id,
                correct_option=question.find_option(question.correct_option_id),
                selected_option=question.find_option(item.selected_option_id),
                status=item.outcome,
            )
        )
    return views
