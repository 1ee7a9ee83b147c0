"""Debounced, sequence-numbered task scheduling.

Network-triggered work (preview refresh, suggestion recompute) runs behind a
debounce: every qualifying change rearms the timer and cancels the pending
run, so only the final state in a burst of edits is dispatched. A run still
in flight when a newer one is scheduled is cancelled as superseded.

RecomputeNonce guards suggestion dispatch: a nonce is handled at most once,
and late or duplicate firings for a handled nonce are dropped, not retried.
"""

import asyncio
from collections.abc import Awaitable, Callable

from loguru import logger


class RecomputeNonce:
    """Monotonically increasing change counter with at-most-once handling."""

    def __init__(self) -> None:
        self.value = 0
        self.last_handled = 0

    def bump(self) -> int:
        self.value += 1
        return self.value

    def claim(self, nonce: int) -> bool:
        """Mark a nonce handled. Returns False if it was already handled."""
        if nonce == self.last_handled:
            return False
        self.last_handled = nonce
        return True


class DebouncedTask:
    """Runs an async callback after a quiet period.

    Attributes:
        name: Label used in logs
        delay_seconds: Quiet period before the callback runs
        sequence: Number of schedule() calls so far; the latest one wins
    """

    def __init__(self, name: str, delay_seconds: float, callback: Callable[[], Awaitable[None]]):
        self.name = name
        self.delay_seconds = delay_seconds
        self.sequence = 0
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def schedule(self) -> int:
        """Arm (or rearm) the timer. Must be called from a running event loop."""
        self.sequence += 1
        sequence = self.sequence
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._run(sequence), name=f"{self.name}:{sequence}")
        self._task.add_done_callback(self._on_done)
        return sequence

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug(f"[SCHEDULER] {self.name} superseded")
        self._task = None

    async def wait(self) -> None:
        """Wait for the current run (if any) to finish or be cancelled.

        Callback errors are logged by the task itself and not re-raised here.
        """
        while self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def _run(self, sequence: int) -> None:
        await asyncio.sleep(self.delay_seconds)
        if sequence != self.sequence:
            return
        logger.debug(f"[SCHEDULER] {self.name} firing sequence={sequence}")
        await self._callback()

    def _on_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(f"[SCHEDULER] {self.name} callback failed: {error}")
