import pytest

from picotimer.controller import AppController
from picotimer.protocol import build_url


class FakeScheduler:
    """Deterministic stand-in for Tk's after/after_cancel."""

    def __init__(self):
        self.now = 0
        self.jobs = {}
        self._seq = 0

    def after(self, ms, func):
        self._seq += 1
        job = f"after#{self._seq}"
        self.jobs[job] = (self.now + ms, self._seq, func)
        return job

    def after_cancel(self, job):
        self.jobs.pop(job, None)

    def advance(self, ms):
        end = self.now + ms
        while True:
            due = [(when, seq, job) for job, (when, seq, _f) in self.jobs.items() if when <= end]
            if not due:
                break
            when, _seq, job = min(due)
            _w, _s, func = self.jobs.pop(job)
            self.now = when
            func()
        self.now = end


class FakeModel:
    def __init__(self):
        self.sent = []
        self.hosts = []
        self.disconnects = 0
        self.open = False
        self.pending = []

    def connect(self, host):
        url = build_url(host, 8080)
        self.hosts.append(host)
        return url

    def disconnect(self):
        self.disconnects += 1
        was_open, self.open = self.open, False
        return was_open

    def send(self, text):
        if not self.open:
            return False
        self.sent.append(text)
        return True

    def push(self, kind, payload=None):
        if kind == "open":
            self.open = True
        elif kind in ("close", "error"):
            self.open = False
        self.pending.append((kind, payload))

    def drain(self):
        while self.pending:
            yield self.pending.pop(0)


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def model():
    return FakeModel()


@pytest.fixture
def controller(model, scheduler):
    return AppController({'timer': {'duration': 30}}, model=model, scheduler=scheduler)


@pytest.fixture
def connected(controller, model):
    controller.connect("10.0.0.5")
    model.push("open", "ws://10.0.0.5:8080")
    controller.process_events()
    return controller
