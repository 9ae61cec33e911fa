"""Utilities for importing question banks from JSON files.

File format::

    {
      "questions": [
        {
          "question": "What is $2 + 2$?",
          "options": ["3", "4", "5", "22"],
          "correctIndex": 1,
          "comprehension": "optional passage",
          "image_url": "optional image reference"
        }
      ]
    }

Records are validated one by one. An invalid record is skipped with a
warning and the rest of the batch is still imported.
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from pathlib import Path

from exam_portal.core.models import BankQuestion
from exam_portal.storage.backend import BackendError, PortalBackend

logger = logging.getLogger(__name__)


class QuestionBankImportError(Exception):
    """Raised when a question bank file cannot be read at all."""


@dataclass(slots=True)
class ParsedBank:
    records: list[BankQuestion]
    skipped: int


@dataclass(slots=True)
class ImportReport:
    created: int
    skipped: int


def load_question_bank(file_path: Path) -> ParsedBank:
    try:
        text = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise QuestionBankImportError(f"Could not read {file_path}: {exc}") from exc
    return parse_question_bank(text)


def parse_question_bank(text: str) -> ParsedBank:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise QuestionBankImportError(f"Question bank is not valid JSON: {exc.msg}") from exc

    if not isinstance(data, dict) or not isinstance(data.get("questions"), list):
        raise QuestionBankImportError('Invalid JSON format. Expected { "questions": [...] }')

    records: list[BankQuestion] = []
    skipped = 0
    for position, raw in enumerate(data["questions"], start=1):
        record = _parse_record(raw)
        if record is None:
            skipped += 1
            logger.warning("Skipping invalid question #%d: %r", position, raw)
            continue
        records.append(record)
    return ParsedBank(records=records, skipped=skipped)


def import_question_bank(backend: PortalBackend, subject_id: int, bank: ParsedBank) -> ImportReport:
    """Insert every valid record; a record the backend rejects is skipped."""
    created = 0
    skipped = bank.skipped
    for record in bank.records:
        try:
            backend.add_question(
                subject_id,
                record.question,
                record.options,
                record.correct_index,
                comprehension=record.comprehension,
                image_url=record.image_url,
            )
        except (BackendError, ValueError) as exc:
            skipped += 1
            logger.error("Question insert failed for %r: %s", record.question[:60], exc)
            continue
        created += 1
    logger.info("Imported %d questions into subject %d (%d skipped)", created, subject_id, skipped)
    return ImportReport(created=created, skipped=skipped)


def _parse_record(raw: object) -> BankQuestion | None:
    if not isinstance(raw, dict):
        return None

    question = raw.get("question")
    if not isinstance(question, str) or not question.strip():
        return None

    options = raw.get("options")
    if not isinstance(options, list) or len(options) < 2:
        return None
    if any(not isinstance(option, str) for option in options):
        return None

    correct_index = raw.get("correctIndex")
    # bool is an int subclass; reject true/false explicitly.
    if isinstance(correct_index, bool) or not isinstance(correct_index, int):
        return None
    if not 0 <= correct_index < len(options):
        return None

    return BankQuestion(
        question=question.strip(),
        options=[option.strip() for option in options],
        correct_index=correct_index,
        comprehension=_optional_text(raw.get("comprehension")),
        image_url=_optional_text(raw.get("image_url")),
    )


def _optional_text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
