"""Per-question visitation/answer/review status."""

from __future__ import annotations

from enum import Enum


class QuestionStatus(str, Enum):
    """The five states a question can be in during an exam."""

    NOT_VISITED = "not_visited"
    NOT_ANSWERED = "not_answered"
    ANSWERED = "answered"
    REVIEW = "review"
    ANSWERED_AND_REVIEW = "answered_and_review"


def derive_status(visited: bool, answered: bool, marked: bool) -> QuestionStatus:
    """Map the three progress flags of a question onto exactly one status.

    Answering or marking a question implies it was visited, so those flags
    take precedence over ``visited``.
    """
    if answered and marked:
        return QuestionStatus.ANSWERED_AND_REVIEW
    if answered:
        return QuestionStatus.ANSWERED
    if marked:
        return QuestionStatus.REVIEW
    if visited:
        return QuestionStatus.NOT_ANSWERED
    return QuestionStatus.NOT_VISITED
