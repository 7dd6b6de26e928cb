#!/usr/bin/env python3
"""
Goal Timer - track personal goals against a countdown
Add goals with a duration in minutes, pick one from the table and start its
timer. When it runs out you get a sound, a desktop notification and a popup.
"""

import argparse
import logging
import tkinter as tk
from tkinter import ttk, messagebox

from goal_logic import (
    GoalTimerState,
    InvalidDurationError,
    EmptyDescriptionError,
    IndexOutOfRangeError,
    NoSelectionError,
    SessionAlreadyActiveError,
    format_time,
)
from managers import ConfigManager, NotificationManager, SoundManager, SOUND_NAMES

logger = logging.getLogger("goaltimer.app")

COLUMNS = ("goal", "timer", "countdown")


def parse_window_size(value):
    """'WxH' -> (w, h); anything unusable falls back to the default size"""
    try:
        w, h = (int(v) for v in str(value).lower().split("x"))
        if w <= 0 or h <= 0:
            raise ValueError(f"non-positive size {value!r}")
    except ValueError as e:
        default = ConfigManager.DEFAULTS["window_size"]
        logger.warning("Bad window_size %r (%s), using %s", value, e, default)
        w, h = (int(v) for v in default.split("x"))
    return w, h

# ===================== MAIN APP =====================

class GoalTimerApp:
    def __init__(self, root, config=None):
        self.root = root
        self.root.title("Goal Timer Application")

        # Managers
        self.config = config or ConfigManager()
        self.sound_mgr = SoundManager(enabled=self.config.get("sound") != "None")
        self.notif_mgr = NotificationManager(enabled=self.config.get("notifications", True))

        # Logic
        self.state = GoalTimerState(
            root,
            on_change=self.on_goals_changed,
            on_tick=self.on_timer_tick,
            on_expire=self.on_timer_expire,
        )
        self.countdown_text = None

        self._apply_theme()
        self._setup_ui()
        self._set_window_size()
        self.root.protocol("WM_DELETE_WINDOW", self._on_close)

    def _set_window_size(self):
        self.root.update_idletasks()
        w, h = parse_window_size(self.config.get("window_size"))
        x = (self.root.winfo_screenwidth() - w) // 2
        y = (self.root.winfo_screenheight() - h) // 2
        self.root.geometry(f"{w}x{h}+{x}+{y}")

    def _apply_theme(self):
        style = ttk.Style(self.root)
        theme = self.config.get("theme")
        if theme:
            if theme in style.theme_names():
                style.theme_use(theme)
            else:
                logger.warning("Unknown ttk theme %r, keeping %r", theme, style.theme_use())
        style.configure("Treeview", rowheight=30)

    def _setup_ui(self):
        main = ttk.Frame(self.root)
        main.pack(fill=tk.BOTH, expand=True)

        # Goal input
        form = ttk.Frame(main, padding=10)
        form.pack(fill=tk.X)
        form.columnconfigure(1, weight=1)

        ttk.Label(form, text="Enter your goal:").grid(row=0, column=0, sticky="w", pady=5)
        self.goal_entry = ttk.Entry(form)
        self.goal_entry.grid(row=0, column=1, sticky="ew", padx=(10, 0), pady=5)

        ttk.Label(form, text="Enter the timer for the goal (minutes):").grid(
            row=1, column=0, sticky="w", pady=5)
        self.minutes_entry = ttk.Entry(form)
        self.minutes_entry.grid(row=1, column=1, sticky="ew", padx=(10, 0), pady=5)
        self.minutes_entry.bind("<Return>", lambda e: self._add_goal())

        ttk.Button(form, text="Add goal to the list", command=self._add_goal).grid(
            row=2, column=0, sticky="w", pady=5)

        # Goal table
        table = ttk.Frame(main, padding=(10, 0))
        table.pack(fill=tk.BOTH, expand=True)

        self.tree = ttk.Treeview(table, columns=COLUMNS, show="headings", selectmode="browse")
        for col, title in zip(COLUMNS, ("Goal", "Timer", "Countdown")):
            self.tree.heading(col, text=title)
            self.tree.column(col, anchor=tk.CENTER, width=140)

        scrollbar = ttk.Scrollbar(table, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscrollcommand=scrollbar.set)
        self.tree.pack(side="left", fill="both", expand=True)
        scrollbar.pack(side="right", fill="y")

        # Controls
        controls = ttk.Frame(main, padding=10)
        controls.pack(fill=tk.X)

        self.start_btn = ttk.Button(controls, text="Start Timer", command=self._start_timer)
        self.start_btn.pack(side=tk.LEFT, expand=True)
        self.stop_btn = ttk.Button(controls, text="Stop Timer", command=self._stop_timer,
                                   state="disabled")
        self.stop_btn.pack(side=tk.LEFT, expand=True)

        self.sound_var = tk.StringVar(value=self.config.get("sound", "Chime"))
        ttk.Combobox(controls, textvariable=self.sound_var, values=SOUND_NAMES,
                     width=7, state="readonly").pack(side=tk.RIGHT)
        ttk.Label(controls, text="Sound:").pack(side=tk.RIGHT, padx=4)
        self.sound_var.trace_add("write", lambda *a: self._change_sound())

    # ----- user actions -----

    def _add_goal(self):
        try:
            goal = self.state.add_goal(self.goal_entry.get(), self.minutes_entry.get())
        except InvalidDurationError:
            messagebox.showerror("Invalid Timer", "Please enter a valid timer value (numeric).")
            return
        except EmptyDescriptionError:
            messagebox.showerror("Invalid Goal", "Please enter a description for the goal.")
            return

        self.goal_entry.delete(0, tk.END)
        self.minutes_entry.delete(0, tk.END)
        messagebox.showinfo("Goal Added", f"Goal '{goal.description}' added successfully!")

    def _selected_row(self):
        selection = self.tree.selection()
        if not selection:
            return None
        return self.tree.index(selection[0])

    def _start_timer(self):
        try:
            session = self.state.start_selected(self._selected_row())
        except (NoSelectionError, IndexOutOfRangeError):
            messagebox.showinfo("No Goal Selected", "Please select a goal from the table.")
            return
        except SessionAlreadyActiveError as e:
            messagebox.showwarning(
                "Timer Running",
                f"A timer is already running for goal: {e.session.goal.description}\n"
                "Stop it before starting another one.")
            return

        self.countdown_text = format_time(session.remaining_seconds)
        self._update_buttons()

    def _stop_timer(self):
        row = self.state.running_row()
        session = self.state.stop()
        if session is not None and row is not None:
            self._set_countdown(row, format_time(session.goal.duration_seconds))
        self.countdown_text = None
        self._update_buttons()

    def _change_sound(self):
        name = self.sound_var.get()
        self.config.set("sound", name)
        if name != "None" and not self.sound_mgr.available:
            self.sound_mgr = SoundManager()

    def _on_close(self):
        self.state.stop()
        self.sound_mgr.stop()
        self.root.destroy()

    # ----- core callbacks -----

    def on_goals_changed(self, registry):
        """Redraw the whole table from the registry"""
        self.tree.delete(*self.tree.get_children())
        for row in registry.snapshot():
            self.tree.insert("", tk.END, values=row)

        running = self.state.running_row()
        if running is not None and self.countdown_text:
            self._set_countdown(running, self.countdown_text)

    def on_timer_tick(self, session, text):
        self.countdown_text = text
        self._set_countdown(self.state.registry.index_of(session.goal), text)

    def on_timer_expire(self, session):
        self.countdown_text = None
        self._update_buttons(running=False)
        self._play_alarm("Goal Timer", f"Time's up for goal: {session.goal.description}")

    # ----- helpers -----

    def _set_countdown(self, row, text):
        children = self.tree.get_children()
        if 0 <= row < len(children):
            self.tree.set(children[row], "countdown", text)

    def _update_buttons(self, running=None):
        if running is None:
            running = self.state.engine.is_running
        self.start_btn.config(state="disabled" if running else "normal")
        self.stop_btn.config(state="normal" if running else "disabled")

    def _play_alarm(self, title, msg):
        """Sound + notification + modal popup"""
        self.sound_mgr.play(self.sound_var.get(), loop=True)
        self.notif_mgr.show(title, msg)
        messagebox.showinfo(title, msg)
        self.sound_mgr.stop()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Track goals against a countdown timer")
    parser.add_argument("--debug", action="store_true", help="log every tick")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    root = tk.Tk()
    GoalTimerApp(root)
    root.mainloop()


if __name__ == "__main__":
    main()
