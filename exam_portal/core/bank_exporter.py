"""Utilities for exporting a subject's questions to the JSON import format."""

from __future__ import annotations

import json
from pathlib import Path

from exam_portal.core.models import Question


def save_question_bank(file_path: Path, questions: list[Question]) -> None:
    """Persist the provided questions to disk in the bank import format."""

    if not questions:
        raise ValueError("Cannot export a subject without questions.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    document = {"questions": [_serialize_question(question) for question in questions]}
    file_path.write_text(json.dumps(document, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def _serialize_question(question: Question) -> dict[str, object]:
    option_ids = [option.id for option in question.options]
    if question.correct_option_id not in option_ids:
        raise ValueError(f"Question {question.number} has no valid correct option.")

    record: dict[str, object] = {
        "question": question.prompt,
        "options": [option.text for option in question.options],
        "correctIndex": option_ids.index(question.correct_option_id),
    }
    if question.comprehension:
        record["comprehension"] = question.comprehension
    if question.image_url:
        record["image_url"] = question.image_url
    return record
