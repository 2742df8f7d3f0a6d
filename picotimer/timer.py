import logging

log = logging.getLogger(__name__)

TICK_MS = 100
TICK_STEP = 0.1


class TimerEngine:
    """Countdown driven by a Tk-style scheduler.

    ``scheduler`` needs ``after(ms, func)`` returning a job id and
    ``after_cancel(job)``; a Tk root does both.
    """

    def __init__(self, scheduler=None, on_timeout=None, on_tick=None, interval_ms=TICK_MS):
        self.scheduler = scheduler
        self.on_timeout = on_timeout
        self.on_tick = on_tick
        self.interval_ms = interval_ms
        self.remaining = 0.0
        self.running = False
        self._job = None

    @property
    def ticking(self):
        return self._job is not None

    def start(self, duration):
        self.remaining = round(float(duration), 1)
        self.running = True
        self._cancel_job()
        self._schedule()
        log.debug(f"[Timer] started at {self.remaining:.1f}s")

    def stop(self):
        self.running = False
        self._cancel_job()

    def mark_running(self, running):
        """Apply a remote running flag. Only a stop touches the tick job."""
        if running:
            self.running = True
        else:
            self.stop()

    def _schedule(self):
        self._job = self.scheduler.after(self.interval_ms, self._tick)

    def _cancel_job(self):
        if self._job is not None:
            self.scheduler.after_cancel(self._job)
            self._job = None

    def _tick(self):
        self._job = None
        if not self.running:
            return
        self.remaining = round(max(0.0, self.remaining - TICK_STEP), 1)
        if self.remaining == 0:
            self.running = False
            log.info("[Timer] reached zero")
            if self.on_tick:
                self.on_tick()
            if self.on_timeout:
                self.on_timeout()
            return
        self._schedule()
        if self.on_tick:
            self.on_tick()
