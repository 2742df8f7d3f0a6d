import pytest

tk = pytest.importorskip("tkinter")

from picotimer.models import EXPIRED_COLOR, FG_COLOR, RUNNING_COLOR
from picotimer.views import TimerView, preset_label


@pytest.fixture
def root_cls():
    roots = []

    def make_root():
        try:
            root = tk.Tk()
        except tk.TclError as e:
            pytest.skip(f"no display available: {e}")
        roots.append(root)
        return root

    yield make_root
    for root in roots:
        try:
            root.destroy()
        except tk.TclError:
            pass


@pytest.fixture
def view(controller, root_cls):
    view = TimerView(controller, root_cls=root_cls)
    controller.view = view
    controller.update_view()
    return view


@pytest.fixture
def online(view, controller, model):
    controller.connect("10.0.0.5")
    model.push("open", "ws://10.0.0.5:8080")
    controller.process_events()
    return view


def text_of(widget):
    return str(widget.cget('text'))


def color_of(widget):
    return str(widget.cget('foreground'))


def test_idle_disconnected(view):
    assert text_of(view.status_label) == "Disconnected"
    assert text_of(view.connect_btn) == "Connect"
    assert str(view.address_entry.cget('state')) == tk.NORMAL
    assert view.toggle_btn.instate(['disabled'])
    assert text_of(view.countdown_label) == "30.0"
    assert color_of(view.countdown_label) == FG_COLOR


def test_connected_locks_address(online):
    assert text_of(online.status_label) == "Connected"
    assert text_of(online.connect_btn) == "Disconnect"
    assert str(online.address_entry.cget('state')) == tk.DISABLED
    assert not online.toggle_btn.instate(['disabled'])


def test_running_hides_duration_and_turns_blue(online, controller):
    online.toggle_btn.invoke()
    assert controller.timer.running is True
    assert text_of(online.toggle_btn) == "Stop"
    assert color_of(online.countdown_label) == RUNNING_COLOR
    assert online.duration_frame.winfo_manager() == ""


def test_expired_turns_red_and_restores_duration(online, controller, scheduler):
    online.toggle_btn.invoke()
    scheduler.advance(30000)
    assert text_of(online.countdown_label) == "0.0"
    assert color_of(online.countdown_label) == EXPIRED_COLOR
    assert text_of(online.toggle_btn) == "Start"
    assert online.duration_frame.winfo_manager() == "pack"


def test_typed_duration_is_used_by_start(online, controller, model):
    online.duration_var.set("45")
    assert controller.state.initial_duration == 45.0
    online.toggle_btn.invoke()
    assert model.sent == ["start"]
    assert controller.timer.remaining == 45.0


def test_unparseable_duration_falls_back(view, controller):
    view.duration_var.set("abc")
    assert controller.state.initial_duration == 60.0


def test_preset_sets_duration(view, controller):
    view.on_preset(90)
    assert controller.state.initial_duration == 90.0
    assert view.duration_var.get() == "90.0"


def test_error_text_stays_after_disconnect(view, controller):
    controller.connect("   ")
    assert text_of(view.status_label) == "Disconnected (empty device address)"


def test_preset_label():
    assert preset_label(30) == "30 s"
    assert preset_label(120) == "2 min"
