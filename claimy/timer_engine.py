import asyncio
from dataclasses import dataclass, field
import logging
from typing import Awaitable, Callable, Dict

_LOGGER = logging.getLogger(__name__)

TimerKey = tuple[str, str]
"""(holder_id, resource_code)"""
TimerCallback = Callable[[TimerKey], Awaitable[None]]


@dataclass
class TimerEngine:
    """
    Owner of every countdown and offer timeout in the process.

    Timers are asyncio tasks registered under a (holder_id, resource_code) key. A task only
    invokes its callback while it is still the registered task for its key, so a timer that
    was cancelled or replaced can never fire against state that has since been removed.
    """

    _countdowns: Dict[TimerKey, asyncio.Task] = field(default_factory=dict, init=False)
    _timeouts: Dict[TimerKey, asyncio.Task] = field(default_factory=dict, init=False)

    def start_countdown(
        self, key: TimerKey, period: float, on_tick: TimerCallback
    ) -> None:
        """Start a recurring timer calling on_tick every period seconds, replacing any
        countdown already registered for key."""
        self.cancel_countdown(key)
        task = asyncio.create_task(self._run_countdown(key, period, on_tick))
        self._countdowns[key] = task

    def start_timeout(self, key: TimerKey, delay: float, on_timeout: TimerCallback) -> None:
        """Start a one shot timer calling on_timeout after delay seconds"""
        self.cancel_timeout(key)
        task = asyncio.create_task(self._run_timeout(key, max(0.0, delay), on_timeout))
        self._timeouts[key] = task

    def cancel_countdown(self, key: TimerKey) -> bool:
        return self._cancel(self._countdowns, key)

    def cancel_timeout(self, key: TimerKey) -> bool:
        return self._cancel(self._timeouts, key)

    def has_countdown(self, key: TimerKey) -> bool:
        return key in self._countdowns

    def has_timeout(self, key: TimerKey) -> bool:
        return key in self._timeouts

    async def cancel_all(self) -> None:
        """Cancel every timer and wait for the tasks to finish"""
        tasks = list(self._countdowns.values()) + list(self._timeouts.values())
        self._countdowns.clear()
        self._timeouts.clear()
        current = asyncio.current_task()
        tasks = [task for task in tasks if task is not current]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _cancel(self, tasks: Dict[TimerKey, asyncio.Task], key: TimerKey) -> bool:
        task = tasks.pop(key, None)
        if task is None:
            return False
        # A callback cancelling its own timer must not interrupt itself
        if task is not asyncio.current_task():
            task.cancel()
        return True

    async def _run_countdown(
        self, key: TimerKey, period: float, on_tick: TimerCallback
    ) -> None:
        task = asyncio.current_task()
        try:
            while True:
                await asyncio.sleep(period)
                if self._countdowns.get(key) is not task:
                    return
                try:
                    await on_tick(key)
                except Exception:
                    _LOGGER.error(f"countdown_tick_failed {key}", exc_info=True)
                if self._countdowns.get(key) is not task:
                    return
        except asyncio.CancelledError:
            _LOGGER.debug(f"Countdown cancelled for {key}")
            raise

    async def _run_timeout(
        self, key: TimerKey, delay: float, on_timeout: TimerCallback
    ) -> None:
        task = asyncio.current_task()
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            _LOGGER.debug(f"Timeout cancelled for {key}")
            raise
        if self._timeouts.get(key) is not task:
            return
        del self._timeouts[key]
        try:
            await on_timeout(key)
        except Exception:
            _LOGGER.error(f"timeout_callback_failed {key}", exc_info=True)
