"""
Auto-advance after a finished quiz.

The move is scheduled on the running asyncio loop rather than waited for,
and it is dropped if the learner navigated anywhere during the delay.
"""

from __future__ import annotations

import asyncio

from loguru import logger

from .navigation import PendingAdvance, StudySession

DEFAULT_ADVANCE_DELAY = 2.0


class AutoAdvanceScheduler:
    """Apply a session's PendingAdvance after a fixed, cancelable delay."""

    def __init__(self, session: StudySession, delay: float = DEFAULT_ADVANCE_DELAY):
        self.session = session
        self.delay = delay
        self._task: asyncio.Task | None = None

    @property
    def scheduled(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run(self, pending: PendingAdvance) -> bool:
        """Wait out the delay, then apply ``pending`` if it is still current."""
        await asyncio.sleep(self.delay)
        applied = self.session.resolve_advance(pending)
        if applied:
            logger.debug(f"Auto-advanced to {self.session.state}")
        return applied

    def schedule(self, pending: PendingAdvance) -> asyncio.Task:
        """
        Schedule ``pending`` on the running loop, replacing any earlier one.

        Must be called from a coroutine or callback running on an event loop.
        """
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self.run(pending))
        return self._task

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
