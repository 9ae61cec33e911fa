from __future__ import annotations

import pytest

from exam_portal.core.services.exam_session import ExamSession
from exam_portal.core.services.result_view import (
    ResultNotFoundError,
    ResultRenderer,
    ResultTransferCache,
    recount_from_records,
)
from exam_portal.core.services.submission import AnswerOutcome, ExamSubmitter, grade_questions


def _submit(backend, context, cache):
    subject = backend.get_subject_by_slug("general-knowledge")
    questions = backend.fetch_questions(subject.id)
    session = ExamSession()
    session.initialize(questions, total_time=90, marks_per_answer=1)
    session.select_option(questions[0].correct_option_id)
    session.go_to_question(2)
    session.select_option(questions[2].options[0].id)
    return questions, ExamSubmitter(backend, cache).submit(session, subject.slug, context)


def test_cache_entries_are_consumed_once(clock, questions):
    cache = ResultTransferCache(ttl_seconds=300, clock=clock)
    cache.put("a1", grade_questions(questions, {}))
    assert cache.pop("a1") is not None
    assert cache.pop("a1") is None


def test_cache_entries_expire(clock, questions):
    cache = ResultTransferCache(ttl_seconds=300, clock=clock)
    cache.put("a1", grade_questions(questions, {}))
    clock.advance(301)
    assert len(cache) == 0
    assert cache.pop("a1") is None


def test_first_load_uses_cache_then_backend(seeded_backend, candidate):
    cache = ResultTransferCache()
    questions, receipt = _submit(seeded_backend, candidate, cache)
    renderer = ResultRenderer(seeded_backend, cache)

    cached = renderer.load(receipt.attempt.id)
    fresh = renderer.load(receipt.attempt.id)

    assert cached.source == "cache"
    assert fresh.source == "backend"
    for view in (cached, fresh):
        assert [q.status for q in view.questions] == [
            AnswerOutcome.CORRECT,
            AnswerOutcome.NOT_ATTENDED,
            AnswerOutcome.WRONG,
        ]
        assert view.questions[0].correct_option.text == "4"
        assert view.questions[2].selected_option.text == "Mars"
        assert view.questions[1].selected_option is None
        assert view.score_percent == pytest.approx(33.3)


def test_other_candidates_cannot_load_attempt(seeded_backend, candidate):
    cache = ResultTransferCache()
    _, receipt = _submit(seeded_backend, candidate, cache)
    with pytest.raises(ResultNotFoundError, match="Attempt not found"):
        ResultRenderer(seeded_backend, cache).load(receipt.attempt.id, user_id="someone-else")
    assert len(cache) == 1


def test_missing_attempt(seeded_backend):
    with pytest.raises(ResultNotFoundError, match="Attempt not found"):
        ResultRenderer(seeded_backend, ResultTransferCache()).load("nope")


def test_missing_subject(seeded_backend):
    attempt = seeded_backend.create_attempt(
        user_id="u1", subject="deleted-subject", correct=0, wrong=0, not_attended=1, total_questions=1
    )
    with pytest.raises(ResultNotFoundError, match="Subject not found"):
        ResultRenderer(seeded_backend, ResultTransferCache()).load(attempt.id)


def test_persisted_counts_match_answer_records(seeded_backend, candidate):
    questions, receipt = _submit(seeded_backend, candidate, ResultTransferCache())
    attempt = seeded_backend.get_attempt(receipt.attempt.id)
    records = seeded_backend.list_answer_records(attempt.id)

    summary = recount_from_records(records, {q.id: q for q in questions}, attempt.total_questions)

    assert (summary.correct, summary.wrong, summary.not_attended) == (
        attempt.correct,
        attempt.wrong,
        attempt.not_attended,
    )
