import tkinter as tk
from tkinter import ttk

from .models import (BG_COLOR, BTN_COLOR, ERROR_COLOR, FG_COLOR, FONT_COUNTDOWN, FONT_MAIN, FONT_TITLE, OK_COLOR,
                     ConnectionStatus, countdown_color)
from .protocol import MAX_DURATION, MIN_DURATION


def draw_rounded_rect(canvas, x1, y1, x2, y2, r=20, **kwargs):
    points = [
        (x1 + r, y1),
        (x2 - r, y1),
        (x2, y1 + r),
        (x2, y2 - r),
        (x2 - r, y2),
        (x1 + r, y2),
        (x1, y2 - r),
        (x1, y1 + r)
    ]
    return canvas.create_polygon([coord for p in points for coord in p], smooth=True, splinesteps=20, **kwargs)


def apply_dark_theme(root):
    style = ttk.Style(root)
    try:
        style.theme_use('clam')
    except tk.TclError:
        pass
    style.configure('TLabel', foreground=FG_COLOR, background=BG_COLOR, font=FONT_MAIN)
    style.configure('TFrame', background=BG_COLOR)
    style.configure('TButton', foreground=FG_COLOR, background=BG_COLOR, font=FONT_MAIN, padding=6)
    style.map('TButton', background=[('active', '#005a9e'), ('disabled', '#444444')])
    style.configure('Start.TButton', background=BTN_COLOR)
    style.configure('Stop.TButton', background='#c62828')
    root.configure(bg=BG_COLOR)


def format_seconds(value):
    return f"{value:.1f}"


def preset_label(seconds):
    if seconds >= 60 and seconds % 60 == 0:
        return f"{int(seconds // 60)} min"
    return f"{seconds:g} s"


class TimerView:
    def __init__(self, controller, root_cls=tk.Tk):
        self.controller = controller
        self.root = root_cls()
        self.root.title("Pico Timer")
        self.root.geometry("420x520")
        self.root.configure(bg=BG_COLOR)
        apply_dark_theme(self.root)
        self.build()

    def build(self):
        ttk.Label(self.root, text="TIMER", font=FONT_TITLE).pack(pady=(16, 8))

        conn_frame = ttk.Frame(self.root)
        conn_frame.pack(fill="x", padx=16)

        self.address_var = tk.StringVar(value=self.controller.state.host)
        self.address_entry = tk.Entry(conn_frame, textvariable=self.address_var, width=24, bg=BG_COLOR, fg=FG_COLOR,
                                      insertbackground=FG_COLOR, disabledbackground='#2b2b2b', relief='flat',
                                      highlightthickness=1, highlightbackground='#ffffff', highlightcolor='#ffffff')
        self.address_entry.pack(side=tk.LEFT, fill="x", expand=True, ipady=4)
        self.address_entry.bind('<Return>', lambda _e: self.on_connect_click())

        self.connect_btn = ttk.Button(conn_frame, text="Connect", command=self.on_connect_click, width=11)
        self.connect_btn.pack(side=tk.LEFT, padx=(8, 0))

        status_canvas = tk.Canvas(self.root, width=388, height=40, bg=BG_COLOR, highlightthickness=0)
        status_canvas.pack(pady=(10, 0))
        draw_rounded_rect(status_canvas, 2, 2, 386, 38, r=10, fill="#252525", outline="#3a3a3a")
        self.status_label = ttk.Label(status_canvas, text=ConnectionStatus.DISCONNECTED.value,
                                      foreground=ERROR_COLOR, background="#252525")
        self.status_label.place(relx=0.5, rely=0.5, anchor="center")

        self.duration_frame = ttk.Frame(self.root)
        self.duration_frame.pack(pady=(18, 0))
        ttk.Label(self.duration_frame, text="Duration (seconds)", font=("Segoe UI", 10)).pack()

        self.duration_var = tk.StringVar(value=format_seconds(self.controller.state.initial_duration))
        self.duration_entry = tk.Spinbox(self.duration_frame, textvariable=self.duration_var, from_=MIN_DURATION,
                                         to=MAX_DURATION, increment=0.1, width=10, justify="center",
                                         font=("Segoe UI", 16), bg=BG_COLOR, fg=FG_COLOR, buttonbackground='#2b2b2b',
                                         insertbackground=FG_COLOR, relief='flat', command=self.on_duration_change)
        self.duration_entry.pack(pady=6)
        self.duration_entry.bind('<Return>', lambda _e: self.on_duration_change())
        self.duration_entry.bind('<FocusOut>', lambda _e: self.on_duration_change())
        self.duration_var.trace_add('write', lambda *_args: self.on_duration_change())

        preset_frame = ttk.Frame(self.duration_frame)
        preset_frame.pack()
        for seconds in self.controller.presets:
            ttk.Button(preset_frame, text=preset_label(seconds), width=6,
                       command=lambda s=seconds: self.on_preset(s)).pack(side=tk.LEFT, padx=4)

        self.countdown_label = ttk.Label(self.root, text=format_seconds(self.controller.timer.remaining),
                                         font=FONT_COUNTDOWN)
        self.countdown_label.pack(pady=24)

        self.toggle_btn = ttk.Button(self.root, text="Start", style='Start.TButton', command=self.controller.toggle)
        self.toggle_btn.pack(fill="x", padx=16, ipady=8)

    def on_connect_click(self):
        self.controller.toggle_connection(self.address_var.get())

    def on_duration_change(self):
        self.controller.set_duration(self.duration_var.get())

    def on_preset(self, seconds):
        self.controller.set_duration(seconds)

    def render(self, state, timer):
        live = state.status in (ConnectionStatus.CONNECTING, ConnectionStatus.CONNECTED)
        self.connect_btn.config(text="Disconnect" if live else "Connect")
        self.address_entry.config(state=tk.DISABLED if live else tk.NORMAL)

        text = state.status.value
        if state.status is ConnectionStatus.ERROR and state.detail:
            text = f"{text}: {state.detail}"
        elif state.status is ConnectionStatus.DISCONNECTED and state.last_error:
            text = f"{text} ({state.last_error})"
        self.status_label.config(text=text, foreground=OK_COLOR if state.connected else ERROR_COLOR)

        if timer.running:
            self.duration_frame.pack_forget()
        elif not self.duration_frame.winfo_manager():
            self.duration_frame.pack(pady=(18, 0), before=self.countdown_label)
        shown = format_seconds(state.initial_duration)
        if self.root.focus_get() is not self.duration_entry and self.duration_var.get() != shown:
            self.duration_var.set(shown)

        self.countdown_label.config(text=format_seconds(timer.remaining),
                                   foreground=countdown_color(timer.running, timer.remaining))
        self.toggle_btn.config(text="Stop" if timer.running else "Start",
                               style='Stop.TButton' if timer.running else 'Start.TButton',
                               state=tk.NORMAL if state.connected else tk.DISABLED)

    def close(self):
        try:
            self.root.destroy()
        except tk.TclError:
            pass
