# radar_scheduler.py
import asyncio
import logging
import threading
import time

logger = logging.getLogger("radar.scheduler")


class BroadcastScheduler:
    """Runs the marker pass for every viewer at a fixed rate.

    The loop lives on an asyncio event loop as a single task, so ticks never
    overlap. If a tick overruns the interval the next one fires immediately,
    once; missed ticks are not replayed.
    """

    def __init__(self, registry, engine, interval: float, loop=None, clock=time.monotonic):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.registry = registry
        self.engine = engine
        self.interval = interval
        self.loop = loop
        self._clock = clock
        self._state_lock = threading.Lock()
        self._running = False
        self._generation = 0
        self._task = None
        self._task_loop = None
        self.ticks_run = 0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> bool:
        """Start ticking. Returns False if the scheduler was already running."""
        with self._state_lock:
            if self._running:
                return False
            # Raises RuntimeError when called outside a loop with no loop configured
            loop = self.loop or asyncio.get_running_loop()
            self._task_loop = loop
            self._running = True
            self._generation += 1
            coro = self._run(self._generation)
            if _running_loop() is loop:
                self._task = loop.create_task(coro)
            else:
                self._task = asyncio.run_coroutine_threadsafe(coro, loop)
        logger.info("[RADAR] Player radar started (updates every %dms)", round(self.interval * 1000))
        return True

    def stop(self):
        """Cancel future ticks. Safe to call repeatedly; an in-flight tick may finish."""
        with self._state_lock:
            if not self._running:
                return
            self._running = False
            task, self._task = self._task, None
        loop = self._task_loop
        if task is not None and not loop.is_closed():
            if _running_loop() is loop:
                task.cancel()
            else:
                try:
                    loop.call_soon_threadsafe(task.cancel)
                except RuntimeError:
                    # loop closed in between; its tasks are already gone
                    pass
        logger.info("[RADAR] Player radar stopped")

    async def _run(self, generation):
        next_at = self._clock()
        while True:
            with self._state_lock:
                if not self._running or generation != self._generation:
                    return
            self.run_once()
            next_at += self.interval
            now = self._clock()
            if next_at < now:
                next_at = now
            await asyncio.sleep(next_at - now)

    def run_once(self) -> int:
        """Run one tick over the current viewer snapshot; returns the tick number."""
        tick = None
        try:
            tick = self.engine.next_tick()
            viewers = self.registry.snapshot()
            for viewer in viewers:
                try:
                    self.engine.update_viewer(viewer, viewers, tick)
                except Exception:
                    logger.exception("[ERROR] Failed to send marker update to %s", viewer.label)
        except Exception:
            logger.exception("[ERROR] Error updating player markers")
        finally:
            self.ticks_run += 1
        return tick


def _running_loop():
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None
