from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler

from magview.models.hrrr import utc_hour_now, valid_forecast_hours

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 600
DEFAULT_FORECAST_HOUR = 3
DEFAULT_PARAMETER = "ceiling"
DIMMED_OPACITY = 0.25


def next_forecast_hour(cycle_hour: int, current: int) -> int:
    """Next valid hour for the cycle, wrapping to the first when at the end or off the list."""
    hours = valid_forecast_hours(cycle_hour)
    try:
        index = hours.index(current)
    except ValueError:
        return hours[0]
    if index == len(hours) - 1:
        return hours[0]
    return hours[index + 1]


def previous_forecast_hour(current: int) -> int:
    return max(0, current - 1)


@dataclass(frozen=True)
class PlaybackState:
    cycle_hour: int
    forecast_hour: int = DEFAULT_FORECAST_HOUR
    parameter: str = DEFAULT_PARAMETER
    is_playing: bool = False
    interval_ms: int = DEFAULT_INTERVAL_MS

    @classmethod
    def initial(cls, interval_ms: int = DEFAULT_INTERVAL_MS) -> "PlaybackState":
        return cls(cycle_hour=utc_hour_now(), interval_ms=interval_ms)

    @property
    def valid_forecast_hours(self) -> list[int]:
        return valid_forecast_hours(self.cycle_hour)


class Ticker(Protocol):
    def start(self, interval_ms: int, callback: Callable[[], None]) -> Any: ...

    def cancel(self, handle: Any) -> None: ...


class SchedulerTicker:
    """Repeating timer backed by an APScheduler background scheduler."""

    def __init__(self, scheduler: BackgroundScheduler | None = None) -> None:
        self.scheduler = scheduler or BackgroundScheduler(daemon=True)

    def start(self, interval_ms: int, callback: Callable[[], None]) -> Any:
        if not self.scheduler.running:
            self.scheduler.start()
        return self.scheduler.add_job(
            callback,
            "interval",
            seconds=interval_ms / 1000.0,
            max_instances=1,
            coalesce=True,
        )

    def cancel(self, handle: Any) -> None:
        try:
            handle.remove()
        except JobLookupError:
            pass

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)


StateListener = Callable[[PlaybackState], None]


class PlaybackController:
    """Owns the PlaybackState and the single repeating timer that drives auto-advance.

    The timer is cancelled whenever is_playing, interval_ms or cycle_hour changes
    and restarted if still playing. Ticks from a cancelled timer are ignored.
    Listeners see states in the order they were produced.
    """

    def __init__(self, ticker: Ticker, initial: PlaybackState | None = None) -> None:
        self._ticker = ticker
        self._state = initial or PlaybackState.initial()
        self._lock = threading.Lock()
        self._dispatch = threading.RLock()
        self._handle: Any = None
        self._generation = 0
        self._listeners: list[StateListener] = []
        self._closed = False
        if self._state.is_playing:
            with self._lock:
                self._sync_timer()

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def timer_active(self) -> bool:
        return self._handle is not None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def play(self) -> PlaybackState:
        return self._update(lambda s: replace(s, is_playing=True))

    def pause(self) -> PlaybackState:
        return self._update(lambda s: replace(s, is_playing=False))

    def toggle_play(self) -> PlaybackState:
        return self._update(lambda s: replace(s, is_playing=not s.is_playing))

    def select_cycle(self, cycle_hour: int) -> PlaybackState:
        return self._update(lambda s: replace(s, cycle_hour=cycle_hour))

    def select_hour(self, forecast_hour: int) -> PlaybackState:
        return self._update(lambda s: replace(s, forecast_hour=forecast_hour))

    def select_parameter(self, parameter: str) -> PlaybackState:
        return self._update(lambda s: replace(s, parameter=parameter))

    def set_interval(self, interval_ms: int) -> PlaybackState:
        return self._update(lambda s: replace(s, interval_ms=interval_ms))

    def step_next(self) -> PlaybackState:
        return self._update(
            lambda s: replace(s, forecast_hour=next_forecast_hour(s.cycle_hour, s.forecast_hour))
        )

    def step_previous(self) -> PlaybackState:
        return self._update(lambda s: replace(s, forecast_hour=previous_forecast_hour(s.forecast_hour)))

    def tick(self, generation: int | None = None) -> PlaybackState:
        with self._dispatch:
            with self._lock:
                stale = generation is not None and generation != self._generation
                if stale or not self._state.is_playing or self._closed:
                    return self._state
                current = self._state
                self._state = replace(
                    current,
                    forecast_hour=next_forecast_hour(current.cycle_hour, current.forecast_hour),
                )
                new_state = self._state
            self._notify(new_state)
            return new_state

    def close(self) -> None:
        with self._dispatch:
            with self._lock:
                self._closed = True
                self._cancel_timer()
            self._listeners.clear()

    def _update(self, change: Callable[[PlaybackState], PlaybackState]) -> PlaybackState:
        with self._dispatch:
            with self._lock:
                if self._closed:
                    return self._state
                previous = self._state
                self._state = change(previous)
                if (
                    previous.is_playing != self._state.is_playing
                    or previous.interval_ms != self._state.interval_ms
                    or previous.cycle_hour != self._state.cycle_hour
                ):
                    self._sync_timer()
                new_state = self._state
            if new_state != previous:
                self._notify(new_state)
            return new_state

    def _sync_timer(self) -> None:
        self._cancel_timer()
        if not self._state.is_playing:
            return
        self._generation += 1
        generation = self._generation
        self._handle = self._ticker.start(self._state.interval_ms, lambda: self.tick(generation))
        logger.debug("Playback timer started (every %d ms)", self._state.interval_ms)

    def _cancel_timer(self) -> None:
        if self._handle is None:
            return
        handle = self._handle
        self._handle = None
        self._generation += 1
        self._ticker.cancel(handle)

    def _notify(self, state: PlaybackState) -> None:
        for listener in list(self._listeners):
            listener(state)


class FrameDisplay:
    """Presentation-only holder for the frame being shown.

    A load failure dims the frame and nothing else; playback state is untouched.
    """

    def __init__(self) -> None:
        self.url: str | None = None
        self.opacity = 1.0

    @property
    def dimmed(self) -> bool:
        return self.opacity < 1.0

    def show(self, url: str) -> None:
        self.url = url
        self.opacity = 1.0

    def mark_failed(self) -> None:
        self.opacity = DIMMED_OPACITY
