"""Exam-wide and per-question countdowns driving an exam session."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from exam_portal.constants.exam_constants import TIMER_TICK_SECONDS
from exam_portal.core.services.exam_session import ExamSession

logger = logging.getLogger(__name__)


class ExamTimers:
    """Two independent cancellable interval tasks bound to one session.

    Both loops run on the event loop that owns the session, so every tick
    runs to completion before any other callback can touch the session.
    """

    def __init__(
        self,
        session: ExamSession,
        *,
        tick_seconds: float = TIMER_TICK_SECONDS,
        on_time_expired: Callable[[], None] | None = None,
    ) -> None:
        self._session = session
        self._tick_seconds = tick_seconds
        self._on_time_expired = on_time_expired
        self._exam_task: asyncio.Task[None] | None = None
        self._question_task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return any(task is not None and not task.done() for task in (self._exam_task, self._question_task))

    def start(self) -> None:
        """Create both interval tasks on the running event loop."""
        if self.running:
            return
        self._exam_task = asyncio.create_task(self._run_exam_clock(), name="exam-clock")
        self._question_task = asyncio.create_task(self._run_question_clock(), name="question-clock")

    def cancel(self) -> None:
        """Cancel both tasks. Safe to call more than once."""
        for task in (self._exam_task, self._question_task):
            if task is not None and not task.done():
                task.cancel()
        self._exam_task = None
        self._question_task = None

    def on_exam_tick(self) -> None:
        session = self._session
        if not session.is_active:
            return
        remaining = session.tick()
        notice = session.check_time_thresholds()
        if notice:
            logger.info("Time notice raised: %s", notice)
        if remaining <= 0:
            session.expire()
            logger.info("Exam time expired; submission required")
            if self._on_time_expired is not None:
                self._on_time_expired()

    def on_question_tick(self) -> None:
        session = self._session
        if not session.is_active:
            return
        if session.tick_question() > 0:
            return
        # Stays at zero on the last question.
        session.next_question()

    async def _run_exam_clock(self) -> None:
        while self._session.is_active:
            await asyncio.sleep(self._tick_seconds)
            self.on_exam_tick()

    async def _run_question_clock(self) -> None:
        while self._session.is_active:
            await asyncio.sleep(self._tick_seconds)
            self.on_question_tick()
