"""
Round Clock - Monotonic time plus the two cadences that drive a round.

A continuous simulation tick (variable interval, reports dt) and a
fixed-interval beat pulse. Both are delivered on the Qt event loop of
the owning thread, so handlers never overlap. The clock owns no game
state.
"""

import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, Qt, Signal, QTimer, QElapsedTimer

from config import TIMING_SETTINGS


logger = logging.getLogger(__name__)


class ScheduledCall:
    """
    A one-shot callback scheduled on a clock.

    Cancelling is idempotent and guarantees the callback never runs.
    """

    def __init__(self, due_ms: float, callback: Callable[[], None],
                 timer: Optional[QTimer] = None):
        self.due_ms = due_ms
        self._callback = callback
        self._timer = timer
        self._cancelled = False
        self._fired = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def fired(self) -> bool:
        return self._fired

    @property
    def pending(self) -> bool:
        return not (self._cancelled or self._fired)

    def cancel(self) -> None:
        """Cancel the call if it has not fired yet."""
        if self._fired:
            return
        self._cancelled = True
        self._release_timer()

    def fire(self) -> None:
        if not self.pending:
            return
        self._fired = True
        self._release_timer()
        self._callback()

    def _release_timer(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class Clock(QObject):
    """
    Abstract base clock: monotonic milliseconds, a tick signal and a beat signal.

    Not usable on its own. Subclasses provide now_ms, start(), stop()
    and call_later(); BeatClock runs on Qt timers, ManualClock is
    stepped by hand.

    Usage:
        clock.ticked.connect(on_tick)    # dt in seconds
        clock.beat.connect(on_beat)      # 1-based beat index
        clock.start()
        ...
        clock.stop()
    """

    # Signals
    ticked = Signal(float)   # seconds since the previous tick
    beat = Signal(int)       # beat index, starting at 1 after start()

    def __init__(self, tick_interval_ms: int = TIMING_SETTINGS.tick_interval_ms,
                 beat_interval_ms: int = TIMING_SETTINGS.beat_interval_ms):
        super().__init__()
        if tick_interval_ms <= 0:
            raise ValueError("tick_interval_ms must be > 0")
        if beat_interval_ms <= 0:
            raise ValueError("beat_interval_ms must be > 0")

        self.tick_interval_ms = tick_interval_ms
        self.beat_interval_ms = beat_interval_ms
        self._is_running = False
        self._beat_index = 0

    @property
    def is_running(self) -> bool:
        """True while both cadences are delivering."""
        return self._is_running

    @property
    def beat_index(self) -> int:
        """Number of beats delivered since the last start()."""
        return self._beat_index

    @property
    def now_ms(self) -> float:
        raise NotImplementedError

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        raise NotImplementedError


class BeatClock(Clock):
    """
    Production clock backed by Qt timers.

    The tick timer fires every tick_interval_ms and reports the measured
    elapsed time, so dt reflects event loop stalls. The beat timer fires
    on its own fixed interval.
    """

    def __init__(self, tick_interval_ms: int = TIMING_SETTINGS.tick_interval_ms,
                 beat_interval_ms: int = TIMING_SETTINGS.beat_interval_ms):
        super().__init__(tick_interval_ms, beat_interval_ms)

        self._elapsed = QElapsedTimer()
        self._last_tick_ms = 0

        # Internal Qt timers
        self._tick_timer = QTimer(self)
        self._tick_timer.setInterval(self.tick_interval_ms)
        self._tick_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._tick_timer.timeout.connect(self._on_tick)

        self._beat_timer = QTimer(self)
        self._beat_timer.setInterval(self.beat_interval_ms)
        self._beat_timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._beat_timer.timeout.connect(self._on_beat)

    @property
    def now_ms(self) -> float:
        """Milliseconds since the clock was first started."""
        if not self._elapsed.isValid():
            return 0
        return self._elapsed.elapsed()

    def start(self) -> None:
        """Start both cadences; beat numbering restarts at 1."""
        if not self._elapsed.isValid():
            self._elapsed.start()
        self._last_tick_ms = self.now_ms
        self._beat_index = 0
        self._is_running = True

        self._tick_timer.start()
        self._beat_timer.start()
        logger.debug("BeatClock started at %s ms", self._last_tick_ms)

    def stop(self) -> None:
        """Stop both cadences. Scheduled calls are unaffected."""
        self._tick_timer.stop()
        self._beat_timer.stop()
        self._is_running = False

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        timer = QTimer(self)
        timer.setSingleShot(True)
        call = ScheduledCall(self.now_ms + delay_ms, callback, timer)
        timer.timeout.connect(call.fire)
        timer.start(max(0, int(delay_ms)))
        return call

    def _on_tick(self) -> None:
        if not self._is_running:
            return
        now = self.now_ms
        dt_ms = now - self._last_tick_ms
        self._last_tick_ms = now
        self.ticked.emit(dt_ms / 1000.0)

    def _on_beat(self) -> None:
        if not self._is_running:
            return
        self._beat_index += 1
        self.beat.emit(self._beat_index)


class ManualClock(Clock):
    """
    Deterministic clock advanced explicitly, for headless simulation.

    advance() moves time forward in tick-sized steps. Within each step
    the tick is delivered first, then any beats that fell due, then any
    scheduled calls that fell due.
    """

    def __init__(self, tick_interval_ms: int = TIMING_SETTINGS.tick_interval_ms,
                 beat_interval_ms: int = TIMING_SETTINGS.beat_interval_ms,
                 start_ms: float = 0):
        super().__init__(tick_interval_ms, beat_interval_ms)
        self._now_ms = start_ms
        self._next_beat_ms = start_ms + beat_interval_ms
        self._scheduled: list[ScheduledCall] = []

    @property
    def now_ms(self) -> float:
        return self._now_ms

    def start(self) -> None:
        self._beat_index = 0
        self._next_beat_ms = self._now_ms + self.beat_interval_ms
        self._is_running = True

    def stop(self) -> None:
        self._is_running = False

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> ScheduledCall:
        call = ScheduledCall(self._now_ms + delay_ms, callback)
        self._scheduled.append(call)
        return call

    def advance(self, ms: float, step_ms: Optional[float] = None) -> None:
        """
        Move time forward by ms.

        Args:
            ms: Total time to advance
            step_ms: Size of each simulated tick (default: tick_interval_ms)
        """
        if ms < 0:
            raise ValueError("Cannot advance a clock backwards")
        step = step_ms or self.tick_interval_ms
        remaining = ms
        while remaining > 0:
            dt = min(step, remaining)
            remaining -= dt
            self._step(dt)

    def _step(self, dt_ms: float) -> None:
        self._now_ms += dt_ms

        if self._is_running:
            self.ticked.emit(dt_ms / 1000.0)

        while self._is_running and self._next_beat_ms <= self._now_ms:
            self._beat_index += 1
            self._next_beat_ms += self.beat_interval_ms
            self.beat.emit(self._beat_index)

        self._run_due_calls()

    def _run_due_calls(self) -> None:
        due = [c for c in self._scheduled if c.due_ms <= self._now_ms]
        if not due:
            return
        self._scheduled = [c for c in self._scheduled if c.due_ms > self._now_ms]
        for call in sorted(due, key=lambda c: c.due_ms):
            call.fire()
