import logging

from .models import DEFAULT_HOST, AppState, ConnectionStatus, WebSocketModel
from .protocol import DEFAULT_DURATION, DEFAULT_PORT, Command, parse_duration, parse_status
from .timer import TICK_MS, TimerEngine

POLL_MS = 50

log = logging.getLogger(__name__)


class AppController:
    def __init__(self, config=None, model=None, scheduler=None):
        """config: dict with optional keys 'connection' and 'timer'
        connection: {host, port, open_timeout}
        timer: {duration, tick_ms, presets} with duration in seconds
        """
        self.config = config or {}
        conn_cfg = self.config.get('connection', {})
        timer_cfg = self.config.get('timer', {})
        if model is None:
            model = WebSocketModel(port=conn_cfg.get('port', DEFAULT_PORT),
                                   open_timeout=conn_cfg.get('open_timeout'))
        self.model = model
        self.state = AppState(host=conn_cfg.get('host', DEFAULT_HOST),
                              initial_duration=parse_duration(timer_cfg.get('duration', DEFAULT_DURATION)))
        self.presets = timer_cfg.get('presets', [30, 60, 90, 120])
        self.timer = TimerEngine(scheduler, on_timeout=self.on_timeout, on_tick=self.update_view,
                                 interval_ms=timer_cfg.get('tick_ms', TICK_MS))
        self.timer.remaining = self.state.initial_duration
        self.scheduler = None
        self.view = None
        self._poll_job = None
        if scheduler is not None:
            self.attach(scheduler)

    def start(self):
        from .views import TimerView
        self.view = TimerView(self)
        self.view.root.protocol("WM_DELETE_WINDOW", self.shutdown)
        self.attach(self.view.root)
        self.update_view()
        self.view.root.mainloop()

    def attach(self, scheduler):
        self.scheduler = scheduler
        self.timer.scheduler = scheduler
        self._schedule_poll()

    def _schedule_poll(self):
        self._poll_job = self.scheduler.after(POLL_MS, self._poll)

    def _poll(self):
        self._poll_job = None
        self.process_events()
        self._schedule_poll()

    def process_events(self):
        handlers = {
            "open": self.on_open,
            "message": self.on_message,
            "error": self.on_error,
            "close": self.on_close,
        }
        for kind, payload in self.model.drain():
            handlers[kind](payload)

    # Connection
    def toggle_connection(self, host=None):
        if self.state.status in (ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED):
            self.disconnect()
        else:
            self.connect(host)

    def connect(self, host=None):
        if self.state.status in (ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED):
            return
        if host is not None:
            self.state.host = host.strip()
        try:
            url = self.model.connect(self.state.host)
        except ValueError as e:
            log.warning(f"[WS] cannot connect: {e}")
            self.on_error(str(e))
            self.on_close()
            return
        self.state.last_error = None
        self._set_status(ConnectionStatus.CONNECTING, url)

    def disconnect(self):
        if self.state.status not in (ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED):
            return
        self.model.disconnect()
        self._set_status(ConnectionStatus.DISCONNECTED, "closed by user")

    def on_open(self, url):
        log.info(f"[WS] connected to {url}")
        self._set_status(ConnectionStatus.CONNECTED, url)

    def on_message(self, raw):
        running = parse_status(raw)
        if running is None or running == self.timer.running:
            return
        log.info(f"[WS] device reports running={running}")
        self.timer.mark_running(running)
        self.update_view()

    def on_error(self, message):
        self.state.last_error = message or "unknown error"
        self._set_status(ConnectionStatus.ERROR, self.state.last_error)

    def on_close(self, _payload=None):
        log.info("[WS] connection closed")
        self._set_status(ConnectionStatus.DISCONNECTED, self.state.last_error or "connection closed")

    def _set_status(self, status, detail=""):
        self.state.status = status
        self.state.detail = detail
        self.update_view()

    # Timer
    def toggle(self):
        if not self.state.connected:
            return
        if self.timer.running:
            self.timer.stop()
            self.send_command(Command.STOP)
        else:
            self.timer.start(self.state.initial_duration)
            self.send_command(Command.START)
        self.update_view()

    def on_timeout(self):
        self.send_command(Command.TIMEOUT)
        self.update_view()

    def set_duration(self, value):
        if self.timer.running:
            return
        self.state.initial_duration = parse_duration(value)
        self.update_view()

    def send_command(self, command):
        return self.model.send(Command(command).value)

    def update_view(self):
        if self.view is not None:
            self.view.render(self.state, self.timer)

    def shutdown(self):
        self.timer.stop()
        self.model.disconnect()
        if self._poll_job is not None and self.scheduler is not None:
            self.scheduler.after_cancel(self._poll_job)
            self._poll_job = None
        if self.view is not None:
            self.view.close()
            self.view = None
