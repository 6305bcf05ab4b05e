from __future__ import annotations
import asyncio
import logging
import time
from typing import Any, Awaitable, Callable, Dict, Hashable

logger = logging.getLogger(__name__)

Callback = Callable[..., Awaitable[Any]]


class Timer:
    """Single-shot timer that awaits ``callback(*args)`` after ``delay`` seconds.

    Cancelling is idempotent, and a timer that has already fired ignores it,
    so a callback may safely re-arm the slot it was scheduled in.
    """

    def __init__(self, delay: float, callback: Callback, *args: Any, name: str = 'timer'):
        self.delay = delay
        self.deadline = time.time() + delay
        self.name = name
        self._fired = False
        self._cancelled = False
        self._task = asyncio.create_task(self._run(callback, args))

    async def _run(self, callback: Callback, args):
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            return
        if self._cancelled:
            return
        self._fired = True
        logger.debug('[timer-fire] %s', self.name)
        try:
            await callback(*args)
        except Exception:
            logger.exception('[timer-error] %s callback failed', self.name)

    def cancel(self) -> bool:
        if self._fired or self._cancelled:
            return False
        self._cancelled = True
        self._task.cancel()
        logger.debug('[timer-cancel] %s', self.name)
        return True

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def active(self) -> bool:
        return not (self._fired or self._cancelled)

    def remaining(self) -> float:
        return max(0.0, self.deadline - time.time()) if self.active else 0.0

    def __await__(self):
        return self._task.__await__()


class TimerManager:
    """Keyed timers; at most one live timer per key."""

    def __init__(self):
        self._timers: Dict[Hashable, Timer] = {}

    def schedule(self, key: Hashable, delay: float, callback: Callback, *args: Any) -> Timer:
        self.cancel(key)
        timer = Timer(delay, callback, *args, name=str(key))
        self._timers[key] = timer
        logger.debug('[timer-set] %s delay=%.1fs', key, delay)
        return timer

    def cancel(self, key: Hashable) -> bool:
        timer = self._timers.pop(key, None)
        if timer is None:
            return False
        return timer.cancel()

    def is_active(self, key: Hashable) -> bool:
        timer = self._timers.get(key)
        return timer is not None and timer.active

    def cancel_all(self) -> None:
        for key in list(self._timers):
            self.cancel(key)

    def __len__(self) -> int:
        return sum(1 for t in self._timers.values() if t.active)


class TurnClock:
    """Turn deadline for one session, backed by a ``TimerManager`` slot.

    Arming replaces whatever deadline was live in the slot.
    """

    def __init__(self, timers: TimerManager, key: Hashable, on_expire: Callback):
        self.timers = timers
        self.key = key
        self.on_expire = on_expire

    def arm(self, seconds: float, turn_serial: int) -> None:
        self.timers.schedule(self.key, seconds, self.on_expire, turn_serial)

    def cancel(self) -> None:
        self.timers.cancel(self.key)
