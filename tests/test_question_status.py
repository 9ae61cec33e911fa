from __future__ import annotations

import itertools

import pytest

from exam_portal.core.question_status import QuestionStatus, derive_status


@pytest.mark.parametrize(
    ("visited", "answered", "marked", "expected"),
    [
        (False, False, False, QuestionStatus.NOT_VISITED),
        (True, False, False, QuestionStatus.NOT_ANSWERED),
        (True, True, False, QuestionStatus.ANSWERED),
        (True, False, True, QuestionStatus.REVIEW),
        (True, True, True, QuestionStatus.ANSWERED_AND_REVIEW),
    ],
)
def test_derive_status(visited, answered, marked, expected):
    assert derive_status(visited=visited, answered=answered, marked=marked) is expected


def test_derivation_is_total():
    for visited, answered, marked in itertools.product([False, True], repeat=3):
        assert derive_status(visited=visited, answered=answered, marked=marked) in set(QuestionStatus)


def test_status_values_are_wire_names():
    assert [status.value for status in QuestionStatus] == [
        "not_visited",
        "not_answered",
        "answered",
        "review",
        "answered_and_review",
    ]
