"""Stand-in for the Pico W timer display.

Serves the device's WebSocket on port 8080: it accepts the text commands
start/stop/timeout and answers every client with ``{"running": bool}``.
A Flask page on port 5000 shows the simulated state.
"""
import asyncio
import json
import logging
import os
import socket
import threading

import websockets
from flask import Flask, jsonify
from websockets.asyncio.server import serve
from websockets.exceptions import ConnectionClosed

log = logging.getLogger("device_sim")

app = Flask(__name__)


class DeviceState:
    def __init__(self):
        self.running = False
        self.clients = set()
        self.commands = []

    def apply(self, command):
        """Apply one command; False when the device does not know it."""
        if command == "start":
            self.running = True
        elif command in ("stop", "timeout"):
            self.running = False
        else:
            return False
        self.commands.append(command)
        return True

    def snapshot(self):
        return {
            'running': self.running,
            'clients': len(self.clients),
            'last_command': self.commands[-1] if self.commands else None,
        }


device = DeviceState()


@app.route('/api/state', methods=['GET'])
def get_state():
    return jsonify(device.snapshot())


async def broadcast_state(state):
    data = json.dumps({'running': state.running})
    for ws in list(state.clients):
        try:
            await ws.send(data)
        except ConnectionClosed:
            pass


def make_handler(state):
    async def ws_handler(websocket):
        state.clients.add(websocket)
        log.info(f"[WS] new connection remote={websocket.remote_address}")
        try:
            await websocket.send(json.dumps({'running': state.running}))
            async for message in websocket:
                if not isinstance(message, str):
                    log.warning("[WS] binary frame ignored")
                    continue
                command = message.strip()
                if state.apply(command):
                    log.info(f"[WS] command {command} -> running={state.running}")
                    await broadcast_state(state)
                else:
                    log.warning(f"[WS] unknown command {command!r}")
        except ConnectionClosed:
            pass
        finally:
            state.clients.discard(websocket)
            log.info("[WS] connection closed")
    return ws_handler


class DeviceServer:
    """Runs the simulated device WebSocket on a background thread."""

    def __init__(self, state=None, host='0.0.0.0', port=8080):
        self.state = state or device
        self.host = host
        self.port = port
        self._thread = None
        self._loop = None
        self._stop = None
        self._ready = threading.Event()

    def start(self, timeout=5):
        self._thread = threading.Thread(target=self._thread_main, daemon=True)
        self._thread.start()
        if not self._ready.wait(timeout):
            raise RuntimeError(f"device simulator did not start on port {self.port}")
        return self

    def stop(self, timeout=5):
        if self._thread is None or not self._thread.is_alive():
            return
        self._loop.call_soon_threadsafe(self._stop.set)
        self._thread.join(timeout)

    def _thread_main(self):
        asyncio.run(self._run())

    async def _run(self):
        self._loop = asyncio.get_running_loop()
        self._stop = asyncio.Event()
        async with serve(make_handler(self.state), self.host, self.port):
            log.info(f"Simulated device listening on ws://{self.host}:{self.port}")
            self._ready.set()
            await self._stop.wait()


def find_free_port(preferred=(8080,)):
    for p in preferred:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind(('0.0.0.0', p))
                return p
            except OSError:
                continue
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(('0.0.0.0', 0))
        return s.getsockname()[1]


def start_servers():
    port = find_free_port()
    ws_ver = getattr(websockets, '__version__', 'unknown')
    log.info(f"Starting simulated device on port {port} - websockets v{ws_ver}")
    DeviceServer(device, port=port).start()
    app.run(host='0.0.0.0', port=int(os.environ.get('SIM_HTTP_PORT', '5000')), use_reloader=False)


if __name__ == '__main__':
    logging.basicConfig(format='%(asctime)s [%(levelname)s] %(name)s - %(message)s',
                        level=os.environ.get('LOG_LEVEL', 'INFO').upper())
    start_servers()
