"""Service holding the state of one exam attempt in progress."""

from __future__ import annotations

from enum import Enum

from exam_portal.constants.exam_constants import (
    FINAL_FIFTH_NOTICE,
    FINAL_FIFTH_THRESHOLD,
    HALF_TIME_NOTICE,
    HALF_TIME_THRESHOLD,
    SECONDS_PER_QUESTION,
    TIME_NOTICE_TICKS,
)
from exam_portal.core.models import ExamMeta, Question
from exam_portal.core.question_status import QuestionStatus, derive_status


class ExamFetchError(Exception):
    """Raised when the questions for an exam cannot be loaded."""


class SessionClosedError(RuntimeError):
    """Raised when an action needs an active session but it has ended."""


class SessionPhase(str, Enum):
    """Lifecycle phase of an exam session."""

    ACTIVE = "active"
    TIME_EXPIRED = "time_expired"
    SUBMITTED = "submitted"
    TERMINATED = "terminated"


class ExamSession:
    """Question list, navigation, answers, review marks and countdowns of one exam."""

    def __init__(self, seconds_per_question: int = SECONDS_PER_QUESTION) -> None:
        self._seconds_per_question = seconds_per_question
        self._questions: list[Question] = []
        self._meta: ExamMeta | None = None
        self._current_index: int = 0
        self._answers: dict[int, int] = {}
        self._visited: set[int] = set()
        self._marked: set[int] = set()
        self._remaining_seconds: int = 0
        self._question_seconds_remaining: int = seconds_per_question
        self._phase = SessionPhase.ACTIVE

        self._half_time_notice_shown: bool = False
        self._final_fifth_notice_shown: bool = False
        self._notice: str | None = None
        self._notice_ticks_left: int = 0

        # Submission UI state
        self.show_submit_modal: bool = False
        self.is_submitting: bool = False
        self.submit_error: str = ""

    def initialize(
        self,
        questions: list[Question],
        total_time: int,
        marks_per_answer: int,
    ) -> None:
        """Reset the session to its initial state for the given questions."""
        if not questions:
            raise ExamFetchError("No questions available for this subject")

        self._questions = list(questions)
        self._meta = ExamMeta(
            total_marks=len(questions) * marks_per_answer,
            total_time=total_time,
            marks_per_answer=marks_per_answer,
        )
        self._current_index = 0
        self._answers = {}
        self._visited = set()
        self._marked = set()
        self._remaining_seconds = total_time
        self._question_seconds_remaining = self._seconds_per_question
        self._phase = SessionPhase.ACTIVE
        self._half_time_notice_shown = False
        self._final_fifth_notice_shown = False
        self._notice = None
        self._notice_ticks_left = 0
        self.show_submit_modal = False
        self.is_submitting = False
        self.submit_error = ""

    # --- Read access ---

    @property
    def questions(self) -> list[Question]:
        return list(self._questions)

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def meta(self) -> ExamMeta | None:
        return self._meta

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def is_active(self) -> bool:
        return self._phase is SessionPhase.ACTIVE

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_question(self) -> Question | None:
        if not self._questions:
            return None
        return self._questions[self._current_index]

    @property
    def is_last_question(self) -> bool:
        return self._current_index == len(self._questions) - 1

    @property
    def remaining_seconds(self) -> int:
        return self._remaining_seconds

    @property
    def question_seconds_remaining(self) -> int:
        return self._question_seconds_remaining

    @property
    def seconds_per_question(self) -> int:
        return self._seconds_per_question

    @property
    def notice(self) -> str | None:
        return self._notice

    def answers(self) -> dict[int, int]:
        """Return a copy of the index -> selected option id mapping."""
        return dict(self._answers)

    def answer_for(self, index: int) -> int | None:
        return self._answers.get(index)

    def status_for(self, index: int) -> QuestionStatus:
        self._check_index(index)
        return derive_status(
            visited=index in self._visited,
            answered=index in self._answers,
            marked=index in self._marked,
        )

    def status_map(self) -> list[QuestionStatus]:
        return [self.status_for(index) for index in range(len(self._questions))]

    # --- Candidate actions ---

    def select_option(self, option_id: int) -> QuestionStatus:
        """Record the answer for the current question and return its new status."""
        self._require_active()
        question = self._questions[self._current_index]
        if not question.has_option(option_id):
            raise ValueError(f"Option {option_id} does not belong to question {question.number}.")
        self._answers[self._current_index] = option_id
        self._visited.add(self._current_index)
        return self.status_for(self._current_index)

    def mark_for_review(self) -> QuestionStatus:
        """Mark the current question for review, then move on unless it is the last."""
        self._require_active()
        marked_index = self._current_index
        self._marked.add(marked_index)
        self._visited.add(marked_index)
        if not self.is_last_question:
            self.go_to_question(marked_index + 1)
        return self.status_for(marked_index)

    def go_to_question(self, index: int) -> None:
        self._require_active()
        self._check_index(index)
        self._visited.add(self._current_index)
        self._current_index = index
        self._visited.add(index)
        self._question_seconds_remaining = self._seconds_per_question

    def next_question(self) -> bool:
        if self.is_last_question:
            return False
        self.go_to_question(self._current_index + 1)
        return True

    def previous_question(self) -> bool:
        if self._current_index == 0:
            return False
        self.go_to_question(self._current_index - 1)
        return True

    # --- Clock ---

    def tick(self) -> int:
        """Count the exam-wide clock down by one second, never below zero."""
        if self._notice_ticks_left > 0:
            self._notice_ticks_left -= 1
            if self._notice_ticks_left == 0:
                self._notice = None
        if self._remaining_seconds > 0:
            self._remaining_seconds -= 1
        return self._remaining_seconds

    def tick_question(self) -> int:
        """Count the per-question clock down by one second, never below zero."""
        if self._question_seconds_remaining > 0:
            self._question_seconds_remaining -= 1
        return self._question_seconds_remaining

    def check_time_thresholds(self) -> str | None:
        """Raise the 50% and 20% notices, each at most once per session."""
        if self._meta is None:
            return None
        total_time = self._meta.total_time
        raised: str | None = None
        if not self._half_time_notice_shown and self._remaining_seconds <= total_time * HALF_TIME_THRESHOLD:
            self._half_time_notice_shown = True
            raised = HALF_TIME_NOTICE
        if not self._final_fifth_notice_shown and self._remaining_seconds <= total_time * FINAL_FIFTH_THRESHOLD:
            self._final_fifth_notice_shown = True
            raised = FINAL_FIFTH_NOTICE
        if raised is not None:
            self._notice = raised
            self._notice_ticks_left = TIME_NOTICE_TICKS
        return raised

    def expire(self) -> None:
        """Enter the time-expired phase, which forces the submission flow."""
        if self._phase is not SessionPhase.ACTIVE:
            return
        self._phase = SessionPhase.TIME_EXPIRED
        self.show_submit_modal = True

    # --- Submission flow ---

    @property
    def can_submit(self) -> bool:
        return self._phase in (SessionPhase.ACTIVE, SessionPhase.TIME_EXPIRED)

    def open_submit_modal(self) -> None:
        if not self.can_submit:
            raise SessionClosedError("Exam session has already ended.")
        self.show_submit_modal = True

    def close_submit_modal(self) -> bool:
        """Dismiss the submit prompt; refused once time has expired."""
        if self._phase is SessionPhase.TIME_EXPIRED:
            return False
        self.show_submit_modal = False
        return True

    def begin_submission(self) -> None:
        if not self.can_submit:
            raise SessionClosedError("Exam session has already ended.")
        self.is_submitting = True
        self.submit_error = ""

    def fail_submission(self, message: str) -> None:
        self.is_submitting = False
        self.submit_error = message

    def complete_submission(self) -> None:
        self.is_submitting = False
        self.show_submit_modal = False
        self._phase = SessionPhase.SUBMITTED

    def terminate(self) -> None:
        """End the session for an integrity violation. Irreversible."""
        self._phase = SessionPhase.TERMINATED
        self.show_submit_modal = False

    def snapshot(self) -> dict[str, object]:
        """Return JSON-ready session state. Correct answers are never included."""
        meta = self._meta
        return {
            "phase": self._phase.value,
            "question_count": len(self._questions),
            "current_index": self._current_index,
            "is_last_question": self.is_last_question,
            "remaining_seconds": self._remaining_seconds,
            "question_seconds_remaining": self._question_seconds_remaining,
            "statuses": [status.value for status in self.status_map()],
            "answers": {str(index): option_id for index, option_id in self._answers.items()},
            "notice": self._notice,
            "show_submit_modal": self.show_submit_modal,
            "is_submitting": self.is_submitting,
            "submit_error": self.submit_error,
            "meta": {
                "total_marks": meta.total_marks,
                "total_time": meta.total_time,
                "marks_per_answer": meta.marks_per_answer,
            } if meta else None,
        }

    def _require_active(self) -> None:
        if not self._questions:
            raise SessionClosedError("Exam session has not been initialized.")
        if self._phase is not SessionPhase.ACTIVE:
            raise SessionClosedError("Exam session is no longer accepting answers.")

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._questions):
            raise IndexError(f"Question index {index} out of range")
