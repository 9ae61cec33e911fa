from __future__ import annotations

import pytest

from exam_portal.core.identity import PortalContext, identity_from_email
from exam_portal.core.models import Question, QuestionOption
from exam_portal.storage.backend import PortalBackend
from exam_portal.storage.database import create_database_engine, create_session_factory


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_question(number: int, correct_offset: int = 0, option_count: int = 4) -> Question:
    base = number * 10
    options = tuple(QuestionOption(id=base + offset, text=f"Option {offset}") for offset in range(option_count))
    return Question(
        id=number,
        number=number,
        prompt=f"Question {number}?",
        options=options,
        correct_option_id=base + correct_offset,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def questions() -> list[Question]:
    return [make_question(number) for number in range(1, 4)]


@pytest.fixture
def backend() -> PortalBackend:
    engine = create_database_engine("sqlite://")
    yield PortalBackend(create_session_factory(engine))
    engine.dispose()


@pytest.fixture
def seeded_backend(backend: PortalBackend) -> PortalBackend:
    subject = backend.create_subject("General Knowledge")
    backend.add_question(subject.id, "What is $2 + 2$?", ["3", "4", "5"], 1)
    backend.add_question(subject.id, "Capital of France?", ["Paris", "Rome", "Madrid"], 0)
    backend.add_question(
        subject.id,
        "Which planet is largest?",
        ["Mars", "Jupiter", "Venus"],
        1,
        comprehension="The solar system has eight planets.",
    )
    return backend


@pytest.fixture
def candidate() -> PortalContext:
    return PortalContext(identity=identity_from_email("ada@example.com", "Ada"))
