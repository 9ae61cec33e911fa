from __future__ import annotations

import pytest

from exam_portal.constants.exam_constants import FINAL_FIFTH_NOTICE, HALF_TIME_NOTICE, TIME_NOTICE_TICKS
from exam_portal.core.question_status import QuestionStatus
from exam_portal.core.services.exam_session import (
    ExamFetchError,
    ExamSession,
    SessionClosedError,
    SessionPhase,
)


@pytest.fixture
def session(questions) -> ExamSession:
    exam = ExamSession()
    exam.initialize(questions, total_time=90, marks_per_answer=1)
    return exam


def test_initialize_sets_initial_state(session, questions):
    assert session.remaining_seconds == 90
    assert session.current_index == 0
    assert session.question_seconds_remaining == 30
    assert session.phase is SessionPhase.ACTIVE
    assert session.status_map() == [QuestionStatus.NOT_VISITED] * len(questions)
    assert session.meta.total_marks == 3
    assert session.meta.total_time == 90


def test_initialize_rejects_empty_question_list():
    with pytest.raises(ExamFetchError, match="No questions available"):
        ExamSession().initialize([], total_time=0, marks_per_answer=1)


def test_reinitialize_resets_progress(session, questions):
    session.select_option(questions[0].options[0].id)
    session.go_to_question(2)
    session.tick()

    session.initialize(questions, total_time=60, marks_per_answer=2)

    assert session.answers() == {}
    assert session.current_index == 0
    assert session.remaining_seconds == 60
    assert session.meta.total_marks == 6


def test_select_option_is_idempotent(session, questions):
    option_id = questions[0].options[2].id
    first = session.select_option(option_id)
    second = session.select_option(option_id)
    assert first is second is QuestionStatus.ANSWERED
    assert session.answers() == {0: option_id}


def test_select_option_replaces_previous_answer(session, questions):
    session.select_option(questions[0].options[0].id)
    session.select_option(questions[0].options[1].id)
    assert session.answer_for(0) == questions[0].options[1].id


def test_select_option_rejects_foreign_option(session, questions):
    with pytest.raises(ValueError):
        session.select_option(questions[1].options[0].id)


def test_select_after_review_becomes_answered_and_review(session, questions):
    session.go_to_question(2)
    session.mark_for_review()
    assert session.status_for(2) is QuestionStatus.REVIEW
    session.select_option(questions[2].options[0].id)
    assert session.status_for(2) is QuestionStatus.ANSWERED_AND_REVIEW


def test_mark_for_review_advances_unless_last(session, questions):
    status = session.mark_for_review()
    assert status is QuestionStatus.REVIEW
    assert session.current_index == 1

    session.select_option(questions[1].options[0].id)
    assert session.mark_for_review() is QuestionStatus.ANSWERED_AND_REVIEW
    assert session.current_index == 2

    session.mark_for_review()
    assert session.current_index == 2


def test_go_to_question_marks_departed_and_target_visited(session):
    session.go_to_question(2)
    assert session.status_map() == [
        QuestionStatus.NOT_ANSWERED,
        QuestionStatus.NOT_VISITED,
        QuestionStatus.NOT_ANSWERED,
    ]


def test_go_to_question_out_of_range(session):
    with pytest.raises(IndexError):
        session.go_to_question(3)
    with pytest.raises(IndexError):
        session.go_to_question(-1)


@pytest.mark.parametrize("target", [0, 1, 2])
def test_navigation_resets_question_countdown(session, target):
    for _ in range(12):
        session.tick_question()
    session.go_to_question(target)
    assert session.question_seconds_remaining == 30


def test_next_and_previous_stop_at_bounds(session):
    assert session.previous_question() is False
    assert session.next_question() is True
    assert session.next_question() is True
    assert session.next_question() is False
    assert session.current_index == 2
    assert session.previous_question() is True
    assert session.current_index == 1


def test_tick_never_goes_below_zero(questions):
    session = ExamSession()
    session.initialize(questions, total_time=2, marks_per_answer=1)
    results = [session.tick() for _ in range(5)]
    assert results == [1, 0, 0, 0, 0]


def test_tick_question_never_goes_below_zero(questions):
    session = ExamSession(seconds_per_question=1)
    session.initialize(questions, total_time=10, marks_per_answer=1)
    assert [session.tick_question() for _ in range(3)] == [0, 0, 0]


def test_threshold_notices_fire_once_each(questions):
    session = ExamSession()
    session.initialize(questions, total_time=10, marks_per_answer=1)
    raised = []
    for _ in range(10):
        session.tick()
        notice = session.check_time_thresholds()
        if notice:
            raised.append(notice)
    assert raised == [HALF_TIME_NOTICE, FINAL_FIFTH_NOTICE]


def test_notice_clears_after_its_display_ticks(questions):
    session = ExamSession()
    session.initialize(questions, total_time=100, marks_per_answer=1)
    for _ in range(50):
        session.tick()
    session.check_time_thresholds()
    assert session.notice == HALF_TIME_NOTICE
    for _ in range(TIME_NOTICE_TICKS - 1):
        session.tick()
        assert session.notice == HALF_TIME_NOTICE
    session.tick()
    assert session.notice is None


def test_expire_forces_undismissable_submit_modal(session):
    session.expire()
    assert session.phase is SessionPhase.TIME_EXPIRED
    assert session.show_submit_modal is True
    assert session.close_submit_modal() is False
    assert session.show_submit_modal is True
    assert session.can_submit is True


def test_actions_refused_after_expiry(session, questions):
    session.expire()
    with pytest.raises(SessionClosedError):
        session.select_option(questions[0].options[0].id)
    with pytest.raises(SessionClosedError):
        session.go_to_question(1)


def test_submit_modal_can_be_closed_while_active(session):
    session.open_submit_modal()
    assert session.show_submit_modal is True
    assert session.close_submit_modal() is True
    assert session.show_submit_modal is False


def test_submission_flags(session):
    session.begin_submission()
    assert session.is_submitting is True
    session.fail_submission("boom")
    assert session.is_submitting is False
    assert session.submit_error == "boom"

    session.begin_submission()
    assert session.submit_error == ""
    session.complete_submission()
    assert session.phase is SessionPhase.SUBMITTED
    assert session.can_submit is False
    with pytest.raises(SessionClosedError):
        session.begin_submission()


def test_terminate_is_irreversible(session):
    session.terminate()
    assert session.phase is SessionPhase.TERMINATED
    with pytest.raises(SessionClosedError):
        session.open_submit_modal()
    session.expire()
    assert session.phase is SessionPhase.TERMINATED


def test_snapshot_hides_correct_answers(session, questions):
    session.select_option(questions[0].options[1].id)
    snapshot = session.snapshot()
    assert snapshot["answers"] == {"0": questions[0].options[1].id}
    assert snapshot["statuses"][0] == "answered"
    assert "correct_option_id" not in repr(snapshot)
