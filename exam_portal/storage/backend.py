"""Relational query API used by the portal for subjects, questions and attempts."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timezone
import logging
import re
from typing import Iterator
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload, sessionmaker

from exam_portal.core.models import AnswerRecord, Attempt, Question, QuestionOption, Subject
from exam_portal.storage.orm import AttemptRow, OptionRow, QuestionRow, SubjectRow, UserAnswerRow

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")
_SLUG_INVALID = re.compile(r"[^a-z0-9-]")


class BackendError(RuntimeError):
    """Raised when the database rejects or fails a request."""


def slugify(name: str) -> str:
    slug = _WHITESPACE.sub("-", name.strip().lower())
    return _SLUG_INVALID.sub("", slug)


class PortalBackend:
    """Stateless request/response client over the portal tables."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _transaction(self, action: str) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Backend failure while trying to %s", action)
            raise BackendError(f"Failed to {action}.") from exc
        finally:
            session.close()

    # --- Subjects ---

    def list_subjects(self) -> list[Subject]:
        with self._transaction("load subjects") as session:
            counts = (
                select(QuestionRow.subject_id, func.count(QuestionRow.id).label("question_count"))
                .group_by(QuestionRow.subject_id)
                .subquery()
            )
            rows = session.execute(
                select(SubjectRow, func.coalesce(counts.c.question_count, 0))
                .outerjoin(counts, counts.c.subject_id == SubjectRow.id)
                .order_by(SubjectRow.name)
            ).all()
            return [
                Subject(id=row.id, name=row.name, slug=row.slug, question_count=count)
                for row, count in rows
            ]

    def get_subject_by_slug(self, slug: str) -> Subject | None:
        with self._transaction("load subject") as session:
            row = session.scalar(select(SubjectRow).where(SubjectRow.slug == slug))
            if row is None:
                return None
            count = session.scalar(
                select(func.count(QuestionRow.id)).where(QuestionRow.subject_id == row.id)
            )
            return Subject(id=row.id, name=row.name, slug=row.slug, question_count=count or 0)

    def create_subject(self, name: str) -> Subject:
        cleaned = name.strip()
        slug = slugify(cleaned)
        if not cleaned or not slug:
            raise ValueError("Subject name must contain letters or digits.")
        with self._transaction("create subject") as session:
            existing = session.scalar(select(SubjectRow.id).where(SubjectRow.slug == slug))
            if existing is not None:
                raise ValueError(f"A subject with slug '{slug}' already exists.")
            row = SubjectRow(name=cleaned, slug=slug)
            session.add(row)
            session.flush()
            return Subject(id=row.id, name=row.name, slug=row.slug)

    def delete_subject(self, subject_id: int) -> None:
        with self._transaction("delete subject") as session:
            row = session.get(SubjectRow, subject_id)
            if row is None:
                raise ValueError(f"Subject {subject_id} does not exist.")
            session.delete(row)

    # --- Questions ---

    def fetch_questions(self, subject_id: int) -> list[Question]:
        """Return the subject's questions in creation order, numbered from 1."""
        with self._transaction("load questions") as session:
            rows = session.scalars(
                select(QuestionRow)
                .where(QuestionRow.subject_id == subject_id)
                .options(selectinload(QuestionRow.options))
                .order_by(QuestionRow.created_at, QuestionRow.id)
            ).all()
            return [
                Question(
                    id=row.id,
                    number=position,
                    prompt=row.question,
                    options=tuple(QuestionOption(id=opt.id, text=opt.option) for opt in row.options),
                    correct_option_id=row.correct_option_id,
                    comprehension=row.comprehension,
                    image_url=row.image_url,
                )
                for position, row in enumerate(rows, start=1)
            ]

    def add_question(
        self,
        subject_id: int,
        prompt: str,
        options: list[str],
        correct_index: int,
        *,
        comprehension: str | None = None,
        image_url: str | None = None,
    ) -> int:
        """Insert a question, its options and the correct-option reference atomically."""
        if not 0 <= correct_index < len(options):
            raise ValueError("Correct option index is out of range.")
        with self._transaction("insert question") as session:
            if session.get(SubjectRow, subject_id) is None:
                raise ValueError(f"Subject {subject_id} does not exist.")
            row = QuestionRow(
                subject_id=subject_id,
                question=prompt.strip(),
                comprehension=comprehension,
                image_url=image_url,
                created_at=_utcnow(),
            )
            row.options = [OptionRow(option=text.strip()) for text in options]
            session.add(row)
            session.flush()
            row.correct_option_id = row.options[correct_index].id
            return row.id

    # --- Attempts ---

    def create_attempt(
        self,
        *,
        user_id: str,
        subject: str,
        correct: int,
        wrong: int,
        not_attended: int,
        total_questions: int,
    ) -> Attempt:
        with self._transaction("save attempt") as session:
            row = AttemptRow(
                id=uuid4().hex,
                user_id=user_id,
                subject=subject,
                correct=correct,
                wrong=wrong,
                not_attended=not_attended,
                total_questions=total_questions,
                created_at=_utcnow(),
            )
            session.add(row)
            session.flush()
            return _attempt_from_row(row)

    def get_attempt(self, attempt_id: str) -> Attempt | None:
        with self._transaction("load attempt") as session:
            row = session.get(AttemptRow, attempt_id)
            return _attempt_from_row(row) if row is not None else None

    def list_attempts(self, subject: str | None = None, limit: int = 50) -> list[Attempt]:
        with self._transaction("load attempts") as session:
            statement = select(AttemptRow).order_by(AttemptRow.created_at.desc()).limit(limit)
            if subject is not None:
                statement = statement.where(AttemptRow.subject == subject)
            return [_attempt_from_row(row) for row in session.scalars(statement)]

    def create_answer_records(self, records: list[AnswerRecord]) -> None:
        if not records:
            return
        with self._transaction("save answers") as session:
            session.add_all(
                UserAnswerRow(
                    attempt_id=record.attempt_id,
                    question_id=record.question_id,
                    selected_option_id=record.selected_option_id,
                )
                for record in records
            )

    def list_answer_records(self, attempt_id: str) -> list[AnswerRecord]:
        with self._transaction("load answers") as session:
            rows = session.scalars(
                select(UserAnswerRow)
                .where(UserAnswerRow.attempt_id == attempt_id)
                .order_by(UserAnswerRow.id)
            )
            return [
                AnswerRecord(
                    attempt_id=row.attempt_id,
                    question_id=row.question_id,
                    selected_option_id=row.selected_option_id,
                )
                for row in rows
            ]


def _attempt_from_row(row: AttemptRow) -> Attempt:
    return Attempt(
        id=row.id,
        user_id=row.user_id,
        subject=row.subject,
        correct=row.correct,
        wrong=row.wrong,
        not_attended=row.not_attended,
        total_questions=row.total_questions,
        created_at=row.created_at,
    )


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
