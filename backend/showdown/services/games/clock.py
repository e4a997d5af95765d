import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_DURATION_SEC = 60


def _spawn_thread(fn, *args):
    worker = threading.Thread(target=fn, args=args, daemon=True)
    worker.start()
    return worker


class RoundClock:
    """Cancellable one-second countdown.

    - start() supersedes any running countdown and reports the full duration
      straight away through on_tick
    - on_tick(remaining) fires once per elapsed second while remaining > 0
    - on_timeout() fires exactly once when the countdown reaches zero,
      unless stop() or another start() got there first
    - spawn/sleep are injectable: production passes the Socket.IO
      background task helpers, tests drive the worker by hand
    """

    def __init__(self, default_duration: int = DEFAULT_DURATION_SEC,
                 spawn: Optional[Callable] = None,
                 sleep: Callable[[float], None] = time.sleep,
                 heartbeat_sec: int = 0):
        self.default_duration = int(default_duration)
        self._spawn = spawn or _spawn_thread
        self._sleep = sleep
        self._heartbeat_sec = int(heartbeat_sec or 0)
        self._lock = threading.Lock()
        self._generation = 0
        self._running = False
        self._remaining = self.default_duration

    @property
    def running(self) -> bool:
        return self._running

    def remaining(self) -> int:
        return self._remaining

    def start(self, duration: Optional[int] = None,
              on_tick: Optional[Callable[[int], None]] = None,
              on_timeout: Optional[Callable[[], None]] = None) -> int:
        duration = self.default_duration if duration is None else int(duration)
        with self._lock:
            if self._running:
                logger.info(f"[clock-supersede] generation={self._generation} remaining={self._remaining}s")
            self._generation += 1
            generation = self._generation
            self._running = True
            self._remaining = duration
        logger.info(f"[clock-start] generation={generation} duration={duration}s")

        if on_tick:
            on_tick(duration)
        self._spawn(self._countdown, generation, on_tick, on_timeout)
        return generation

    def stop(self) -> None:
        with self._lock:
            if self._running:
                logger.info(f"[clock-stop] generation={self._generation} remaining={self._remaining}s")
            # Bumping the generation orphans any worker still sleeping
            self._generation += 1
            self._running = False

    def _countdown(self, generation, on_tick, on_timeout):
        elapsed = 0
        while True:
            self._sleep(1)
            elapsed += 1
            with self._lock:
                if generation != self._generation or not self._running:
                    logger.debug(f"[clock-abort] generation={generation} current={self._generation}")
                    return
                self._remaining = max(0, self._remaining - 1)
                remaining = self._remaining
                expired = remaining <= 0
                if expired:
                    self._running = False

            if self._heartbeat_sec and elapsed % self._heartbeat_sec == 0:
                logger.info(f"[clock-heartbeat] generation={generation} remaining={remaining}s")

            if expired:
                logger.info(f"[clock-fire] generation={generation}")
                if on_timeout:
                    on_timeout()
                return
            if on_tick:
                on_tick(remaining)
