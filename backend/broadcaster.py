#file: backend/broadcaster.py

import enum
import logging
import random
import threading
from datetime import datetime
from typing import Callable, List

from backend.models import Coordinate
from backend.preferences import LocationStore
from backend.scheduler import run_schedule
from backend.synthesis import Series, regenerate_series
from backend.utils import get_current_time

Listener = Callable[[Series], None]


class BroadcasterState(enum.Enum) :
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    DISPOSED = "disposed"


class SeriesBroadcaster :
    """
    Owns the rolling series for one coordinate, regenerates it on a timer and
    pushes every new snapshot to its subscribers.

    All regenerations and notifications run under one lock, so a regeneration
    and its fan-out complete before the next one starts.
    """

    def __init__(self,
                 refresh_seconds: int = 30,
                 location_store: LocationStore | None = None,
                 rng: random.Random | None = None,
                 clock: Callable[[], datetime] = get_current_time,
                 timer: Callable[..., threading.Event] = run_schedule,
                 tz: str | None = None,
                 continuity_hours: int | None = None) :
        self.refresh_seconds = refresh_seconds
        self.location_store = location_store
        self.rng = rng
        self.clock = clock
        self.timer = timer
        self.tz = tz
        self.continuity_hours = continuity_hours

        self.state = BroadcasterState.UNINITIALIZED
        self.coordinate: Coordinate | None = None
        self._current: Series = ()
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()
        self._stop_timer: threading.Event | None = None
        self._hidden = False

    def initialize(self, coord: Coordinate | None = None) -> None :
        """Synthesize the first series and arm the refresh timer, once."""
        with self._lock :
            if self.state == BroadcasterState.DISPOSED :
                raise RuntimeError("Broadcaster has been disposed")
            if self.state != BroadcasterState.UNINITIALIZED :
                return

            self.state = BroadcasterState.INITIALIZING
            if coord is None and self.location_store is not None :
                selected = self.location_store.load()
                if selected is not None :
                    coord = selected.to_coordinate()
            self.coordinate = coord

            self._current = self._regenerate(previous = None)
            self.state = BroadcasterState.READY
            self._stop_timer = self.timer(self.refresh, self.refresh_seconds, name = "series")
            logging.info(f"Series broadcaster ready for {coord}")
            self._notify()

    def refresh(self) -> Series :
        """Replace the current series with a regenerated one and notify subscribers."""
        with self._lock :
            if self.state != BroadcasterState.READY :
                return self._current
            self._current = self._regenerate(previous = self._current)
            self._notify()
            return self._current

    def retarget(self, coord: Coordinate | None) -> Series :
        """Move the series to another coordinate, keeping the timer and every subscriber."""
        with self._lock :
            if self.state == BroadcasterState.DISPOSED :
                raise RuntimeError("Broadcaster has been disposed")
            if self.state != BroadcasterState.READY :
                self.initialize(coord)
                return self._current
            if coord == self.coordinate :
                return self._current

            # history of the old location does not carry over
            self.coordinate = coord
            self._current = self._regenerate(previous = None)
            logging.info(f"Series broadcaster moved to {coord}")
            self._notify()
            return self._current

    def notify_visibility(self, visible: bool) -> bool :
        """Force one regeneration when the consumer comes back to the foreground."""
        with self._lock :
            regained = visible and self._hidden
            self._hidden = not visible
        if regained :
            self.refresh()
        return regained

    def subscribe(self, listener: Listener) -> Callable[[], None] :
        """Register `listener`, hand it the current series right away, return its unsubscribe."""
        with self._lock :
            self._listeners.append(listener)
            self._deliver(listener, self._current)

        def unsubscribe() -> None :
            with self._lock :
                if listener in self._listeners :
                    self._listeners.remove(listener)

        return unsubscribe

    def get_current(self) -> Series :
        return self._current

    @property
    def listener_count(self) -> int :
        return len(self._listeners)

    def dispose(self) -> None :
        with self._lock :
            if self._stop_timer is not None :
                self._stop_timer.set()
                self._stop_timer = None
            self._listeners.clear()
            self.state = BroadcasterState.DISPOSED
        logging.info(f"Series broadcaster for {self.coordinate} disposed")

    def _regenerate(self, previous: Series | None) -> Series :
        return regenerate_series(self.coordinate, previous, now = self.clock(), rng = self.rng,
                                 tz = self.tz, continuity_hours = self.continuity_hours)

    def _notify(self) -> None :
        snapshot = self._current
        for listener in list(self._listeners) :
            self._deliver(listener, snapshot)

    @staticmethod
    def _deliver(listener: Listener, snapshot: Series) -> None :
        try :
            listener(snapshot)
        except Exception :
            logging.exception(f"Series listener {listener!r} failed")
