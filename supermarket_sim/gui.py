from __future__ import annotations

# Simulator control panel (Tkinter).
#
# Architecture:
# - The simulation runs on the engine's worker thread.
# - Tkinter must be updated from the main UI thread.
# - The engine therefore reports through a `QueueNotifier`; we drain its queue
#   and poll `controller.status()` via `root.after(...)`.

import queue
import tkinter as tk
from tkinter import messagebox, ttk
from typing import Any, cast

from .controller import SimulationController
from .engine import EngineState
from .errors import ConfigError, SimulationStateError
from .events import ServicePointType
from .notifier import Notification, QueueNotifier


class DashboardApp:
    def __init__(
        self,
        *,
        controller: SimulationController,
        inbox: "queue.Queue[Notification]",
        refresh_ms: int = 200,
    ) -> None:
        self.controller = controller
        self.inbox = inbox
        self.refresh_ms = refresh_ms

        self.root = tk.Tk()
        self.root.title("Supermarket Simulator")
        self.root.geometry("820x460")

        # Top info bar
        self.info_var = tk.StringVar(value="Stopped")
        ttk.Label(self.root, textvariable=self.info_var).pack(fill=cast(Any, tk.X), padx=10, pady=(10, 5))

        # Control buttons
        bar = ttk.Frame(self.root)
        bar.pack(fill=cast(Any, tk.X), padx=10)
        self.start_btn = ttk.Button(bar, text="Start", command=self.start_simulation)
        self.pause_btn = ttk.Button(bar, text="Pause", command=self.pause_simulation)
        self.resume_btn = ttk.Button(bar, text="Resume", command=self.resume_simulation)
        self.reset_btn = ttk.Button(bar, text="Reset", command=self.reset_simulation)
        for btn in (self.start_btn, self.pause_btn, self.resume_btn, self.reset_btn):
            btn.pack(side=cast(Any, tk.LEFT), padx=(0, 5))

        ttk.Label(bar, text="Delay (ms):").pack(side=cast(Any, tk.LEFT), padx=(20, 5))
        self.delay_var = tk.IntVar(value=controller.config.delay_ms)
        delay = ttk.Spinbox(bar, from_=0, to=5000, increment=20, width=7, textvariable=self.delay_var)
        delay.configure(command=self.apply_delay)
        delay.bind("<Return>", lambda _e: self.apply_delay())
        delay.pack(side=cast(Any, tk.LEFT))

        # Table of service points
        cols = ("stage", "queue_len", "busy", "served", "mean_service", "utilization")
        self.tree = ttk.Treeview(self.root, columns=cols, show="headings", height=6)
        self.tree.heading("stage", text="Service point")
        self.tree.heading("queue_len", text="Queue length")
        self.tree.heading("busy", text="Busy")
        self.tree.heading("served", text="Served")
        self.tree.heading("mean_service", text="Mean service")
        self.tree.heading("utilization", text="Utilization")
        self.tree.column("stage", width=160, anchor=cast(Any, tk.W))
        for col in cols[1:]:
            self.tree.column(col, width=110, anchor=cast(Any, tk.E))
        self.tree.pack(fill=cast(Any, tk.BOTH), expand=True, padx=10, pady=10)

        # Latest notification
        self.event_var = tk.StringVar(value="")
        ttk.Label(self.root, textvariable=self.event_var).pack(fill=cast(Any, tk.X), padx=10, pady=(0, 10))

        self._time_left: int | None = None
        self._ended_at: float | None = None

        self.root.protocol("WM_DELETE_WINDOW", self.close)
        self._update_buttons()

    def start(self) -> None:
        self.root.after(cast(Any, self.refresh_ms), self._refresh)
        self.root.mainloop()

    def close(self) -> None:
        try:
            self.controller.reset()
        finally:
            self.root.destroy()

    # -------------------- button handlers --------------------

    def start_simulation(self) -> None:
        self._ended_at = None
        self._run_command(self.controller.start)

    def pause_simulation(self) -> None:
        self._run_command(self.controller.pause)

    def resume_simulation(self) -> None:
        self._run_command(self.controller.resume)

    def reset_simulation(self) -> None:
        self._run_command(self.controller.reset)
        self._time_left = None
        self._ended_at = None
        self.event_var.set("")

    def apply_delay(self) -> None:
        try:
            delay_ms = int(self.delay_var.get())
        except (tk.TclError, ValueError):
            self.delay_var.set(self.controller.config.delay_ms)
            return
        self._run_command(lambda: self.controller.set_pacing_delay(delay_ms))

    def _run_command(self, command: Any) -> None:
        try:
            command()
        except (ConfigError, SimulationStateError) as e:
            messagebox.showwarning("Simulator", str(e))
        self._update_buttons()

    def _update_buttons(self) -> None:
        state = self.controller.state
        self.start_btn.state(["!disabled"] if state is EngineState.STOPPED else ["disabled"])
        self.pause_btn.state(["!disabled"] if state is EngineState.RUNNING else ["disabled"])
        self.resume_btn.state(["!disabled"] if state is EngineState.PAUSED else ["disabled"])

    # -------------------- UI thread polling --------------------

    def _refresh(self) -> None:
        while True:
            try:
                note = self.inbox.get_nowait()
            except queue.Empty:
                break
            self._apply(note)

        self._render_status(self.controller.status())
        self._update_buttons()
        self.root.after(cast(Any, self.refresh_ms), self._refresh)

    def _apply(self, note: Notification) -> None:
        if note.kind == "time_remaining":
            self._time_left = note.args[0]
        elif note.kind == "simulation_ended":
            self._ended_at = float(note.args[0])
            self._time_left = None
        elif note.kind == "customer_created":
            c = note.args[0]
            self.event_var.set(f"Customer {c.customer_id} ({c.customer_type.name}, {c.items} items) arrived")
        elif note.kind == "customer_moved":
            cid, src, dst = note.args
            self.event_var.set(f"Customer {cid}: {src.value} -> {dst.value}")
        elif note.kind == "customer_completed":
            cid, lane = note.args
            self.event_var.set(f"Customer {cid} left via {lane.value}")

    def _render_status(self, status: dict[str, Any]) -> None:
        report = status["report"]
        parts = [
            f"State: {status['state']}",
            f"Clock: {status['clock']:0.2f} / {status['simulation_time']:0.0f}",
            f"In store: {status['customers_in_store']}",
            f"Completed: {report['completed']}",
            f"Mean time in store: {report['mean_time_in_store']:0.2f}",
        ]
        if self._time_left is not None:
            parts.append(f"~{self._time_left}s left")
        if self._ended_at is not None:
            parts.append(f"ended at {self._ended_at:0.2f}")
        self.info_var.set(" | ".join(parts))

        for item in self.tree.get_children():
            self.tree.delete(item)

        points = status["service_points"]
        for point_type in ServicePointType:
            info = points.get(point_type.value)
            if info is None:
                self.tree.insert("", cast(Any, tk.END), values=(point_type.value, "0", "no", "0", "-", "-"))
                continue
            self.tree.insert(
                "",
                cast(Any, tk.END),
                values=(
                    point_type.value,
                    str(info["queue_len"]),
                    "yes" if info["busy"] else "no",
                    str(info["served"]),
                    f"{info['mean_service_time']:0.2f}",
                    f"{info['utilization'] * 100:0.0f}%",
                ),
            )


def run_dashboard(controller: SimulationController, notifier: QueueNotifier, *, refresh_ms: int = 200) -> None:
    """Open the control panel for `controller`. Blocks until the window closes."""
    app = DashboardApp(controller=controller, inbox=notifier.inbox, refresh_ms=refresh_ms)
    app.start()
