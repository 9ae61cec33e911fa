"""Domain models for the exam portal."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True, frozen=True)
class QuestionOption:
    """One selectable answer of a question."""

    id: int
    text: str


@dataclass(slots=True, frozen=True)
class Question:
    """Multiple-choice question as loaded for an exam. Immutable once loaded."""

    id: int
    number: int
    prompt: str
    options: tuple[QuestionOption, ...]
    correct_option_id: int | None
    comprehension: str | None = None
    image_url: str | None = None

    def find_option(self, option_id: int | None) -> QuestionOption | None:
        if option_id is None:
            return None
        return next((option for option in self.options if option.id == option_id), None)

    def has_option(self, option_id: int) -> bool:
        return self.find_option(option_id) is not None


@dataclass(slots=True)
class Subject:
    """Subject (test) that groups a question bank."""

    id: int
    name: str
    slug: str
    question_count: int = 0


@dataclass(slots=True, frozen=True)
class Attempt:
    """Persisted summary of one completed exam. Never mutated after creation."""

    id: str
    user_id: str
    subject: str
    correct: int
    wrong: int
    not_attended: int
    total_questions: int
    created_at: datetime


@dataclass(slots=True, frozen=True)
class AnswerRecord:
    """Persisted selection for one answered question of an attempt."""

    attempt_id: str
    question_id: int
    selected_option_id: int


@dataclass(slots=True, frozen=True)
class ExamMeta:
    """Scoring and timing metadata fixed when a session is initialized."""

    total_marks: int
    total_time: int
    marks_per_answer: int


@dataclass(slots=True)
class BankQuestion:
    """Validated record from an imported question bank."""

    question: str
    options: list[str]
    correct_index: int
    comprehension: str | None = None
    image_url: str | None = None
