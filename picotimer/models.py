import asyncio
import logging
import queue
import threading
from enum import Enum

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException
from websockets.protocol import State

from .protocol import DEFAULT_DURATION, DEFAULT_PORT, build_url

BG_COLOR = "#1e1e1e"
FG_COLOR = "#ffffff"
BTN_COLOR = "#007acc"
RUNNING_COLOR = "#3b82f6"
EXPIRED_COLOR = "#dc2626"
OK_COLOR = "#00c853"
ERROR_COLOR = "#ff6b6b"
FONT_MAIN = ("Segoe UI", 12)
FONT_TITLE = ("Segoe UI", 16, "bold")
FONT_COUNTDOWN = ("Segoe UI", 48, "bold")

DEFAULT_HOST = "192.168.10.105"

log = logging.getLogger(__name__)


class ConnectionStatus(Enum):
    DISCONNECTED = "Disconnected"
    CONNECTING = "Connecting…"
    CONNECTED = "Connected"
    ERROR = "Connection error"


def countdown_color(running, remaining):
    if running:
        return RUNNING_COLOR
    if remaining > 0:
        return FG_COLOR
    return EXPIRED_COLOR


class AppState:
    """Holds mutable application state used by controller and views."""
    def __init__(self, host=DEFAULT_HOST, initial_duration=DEFAULT_DURATION):
        self.status = ConnectionStatus.DISCONNECTED
        self.host = host
        self.initial_duration = initial_duration
        self.detail = ""
        self.last_error = None

    @property
    def connected(self):
        return self.status is ConnectionStatus.CONNECTED


class WebSocketModel:
    """One WebSocket to the timer device, run on a background asyncio thread.

    Transport events land on ``events`` as ``(generation, kind, payload)``
    with kind one of open/message/error/close. The UI thread reads them
    through ``drain()``, which drops anything from a retired connection.
    """

    def __init__(self, port=DEFAULT_PORT, open_timeout=None):
        self.port = port
        self.open_timeout = open_timeout
        self.events = queue.Queue()
        self._lock = threading.Lock()
        self._generation = 0
        self._thread = None
        self._loop = None
        self._task = None
        self._ws = None

    @property
    def is_open(self):
        ws = self._ws
        return ws is not None and ws.state is State.OPEN

    def connect(self, host):
        url = build_url(host, self.port)
        self.disconnect()
        with self._lock:
            self._generation += 1
            generation = self._generation
        self._thread = threading.Thread(target=self._thread_main, args=(url, generation), daemon=True)
        self._thread.start()
        log.info(f"[WS] connecting to {url}")
        return url

    def disconnect(self):
        with self._lock:
            ws, loop, task = self._ws, self._loop, self._task
            live = self._thread is not None and self._thread.is_alive()
            self._generation += 1
            self._ws = None
            self._loop = None
            self._task = None
        if not live or loop is None:
            return False
        try:
            if ws is not None:
                asyncio.run_coroutine_threadsafe(ws.close(), loop)
            elif task is not None:
                loop.call_soon_threadsafe(task.cancel)
        except RuntimeError:
            # loop already shut down on its own
            return False
        log.info("[WS] disconnect requested")
        return True

    def send(self, text):
        with self._lock:
            ws, loop = self._ws, self._loop
        if ws is None or loop is None or ws.state is not State.OPEN:
            log.debug(f"[WS] not connected, dropped: {text}")
            return False
        try:
            future = asyncio.run_coroutine_threadsafe(ws.send(text), loop)
        except RuntimeError:
            log.debug(f"[WS] loop closed, dropped: {text}")
            return False
        future.add_done_callback(self._report_send)
        log.info(f"OUTPUT -> {text}")
        return True

    def drain(self):
        while True:
            try:
                generation, kind, payload = self.events.get_nowait()
            except queue.Empty:
                return
            if generation != self._generation:
                log.debug(f"[WS] stale {kind} event ignored")
                continue
            yield kind, payload

    def join(self, timeout=None):
        if self._thread is not None:
            self._thread.join(timeout)

    @staticmethod
    def _report_send(future):
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            log.warning(f"[WS] send failed: {exc}")

    def _current(self, generation):
        return generation == self._generation

    def _thread_main(self, url, generation):
        asyncio.run(self._run(url, generation))

    async def _run(self, url, generation):
        with self._lock:
            if not self._current(generation):
                return
            self._loop = asyncio.get_running_loop()
            self._task = asyncio.current_task()
        try:
            async with connect(url, open_timeout=self.open_timeout) as ws:
                with self._lock:
                    if not self._current(generation):
                        return
                    self._ws = ws
                self.events.put((generation, "open", url))
                async for message in ws:
                    self.events.put((generation, "message", message))
        except ConnectionClosed as e:
            log.info(f"[WS] connection closed: {e}")
        except asyncio.CancelledError:
            log.info(f"[WS] connect to {url} cancelled")
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            log.error(f"[WS] {url}: {e}")
            self.events.put((generation, "error", str(e)))
        finally:
            with self._lock:
                if self._current(generation):
                    self._ws = None
                    self._loop = None
                    self._task = None
            self.events.put((generation, "close", None))
