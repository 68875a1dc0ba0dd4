"""Tk control panel: simulated device orientation plus avatar controls."""

from __future__ import annotations

import math
import tkinter as tk
from typing import Callable, Optional

import numpy as np

from ..control.commands import FlyTo, ModeSwitch, Reset, RotateDrag, TouchEvent
from ..control.orientation_source import OrientationSource
from ..math3d.quaternion import euler_yaw_pitch_roll_to_q

_PAD_SIZE = 160


class TkPanelOrientationSource(OrientationSource):
    """Debug source in scene axes (x right, y up, camera looks along -z).

    Yaw/pitch/roll sliders stand in for the device sensor. The panel also
    hosts the rocker pad, mode toggle, reset, walk and fly-to controls, which
    are forwarded to ``on_command`` / ``on_touch``.
    """

    name = "tk-panel"

    def __init__(
        self,
        title: str,
        frame_ms: int = 16,
        calibration_delay_ms: int = 300,
        on_command: Optional[Callable[[object], None]] = None,
        on_touch: Optional[Callable[[TouchEvent], None]] = None,
    ):
        super().__init__()
        self.frame_ms = max(1, int(frame_ms))
        self.calibration_delay_ms = max(0, int(calibration_delay_ms))
        self.on_command = on_command
        self.on_touch = on_touch

        try:
            self.root = tk.Tk()
        except tk.TclError as exc:
            raise RuntimeError(f"source=tk requires a display: {exc}") from exc
        self.root.title(title)

        self._var_yaw = tk.DoubleVar(value=0.0)
        self._var_pitch = tk.DoubleVar(value=0.0)
        self._var_roll = tk.DoubleVar(value=0.0)
        self._var_manual = tk.IntVar(value=0)
        self._var_fly = [tk.StringVar(value="0"), tk.StringVar(value="0"), tk.StringVar(value="-10")]

        self._build_ui()

        self._on_tick = None
        self._closed = False
        self._started = False
        self.root.protocol("WM_DELETE_WINDOW", self._handle_close)

    def _build_ui(self) -> None:
        def add_slider(label: str, var: tk.DoubleVar, lo: int, hi: int) -> None:
            tk.Label(self.root, text=label).pack(anchor="w", padx=10, pady=2)
            tk.Scale(
                self.root,
                from_=lo,
                to=hi,
                orient="horizontal",
                resolution=1,
                length=420,
                variable=var,
            ).pack(padx=10, pady=2)

        add_slider("Device yaw (deg)   [-180..180]", self._var_yaw, -180, 180)
        add_slider("Device pitch (deg) [-89..89]", self._var_pitch, -89, 89)
        add_slider("Device roll (deg)  [-180..180]", self._var_roll, -180, 180)

        row = tk.Frame(self.root)
        row.pack(anchor="w", padx=10, pady=6)
        tk.Checkbutton(
            row,
            text="Manual (rocker) mode",
            variable=self._var_manual,
            command=self._on_mode_toggled,
        ).pack(side="left")
        tk.Button(row, text="Reset", command=lambda: self._send(Reset())).pack(side="left", padx=6)
        walk = tk.Button(row, text="Hold to walk")
        walk.pack(side="left", padx=6)
        walk.bind("<ButtonPress-1>", lambda _e: self._touch(TouchEvent.DOWN))
        walk.bind("<ButtonRelease-1>", lambda _e: self._touch(TouchEvent.UP))
        walk.bind("<Leave>", lambda _e: self._touch(TouchEvent.CANCEL))

        tk.Label(self.root, text="Rocker pad (drag)").pack(anchor="w", padx=10, pady=2)
        self._pad = tk.Canvas(self.root, width=_PAD_SIZE, height=_PAD_SIZE, bg="#202020")
        self._pad.pack(padx=10, pady=2)
        r = _PAD_SIZE / 2
        self._pad.create_oval(2, 2, _PAD_SIZE - 2, _PAD_SIZE - 2, outline="#808080")
        self._knob = self._pad.create_oval(r - 8, r - 8, r + 8, r + 8, fill="#c0c0c0")
        self._pad.bind("<B1-Motion>", self._on_pad_drag)
        self._pad.bind("<ButtonRelease-1>", self._on_pad_release)

        fly = tk.Frame(self.root)
        fly.pack(anchor="w", padx=10, pady=6)
        tk.Label(fly, text="Fly to x/y/z").pack(side="left")
        for var in self._var_fly:
            tk.Entry(fly, textvariable=var, width=6).pack(side="left", padx=2)
        tk.Button(fly, text="Fly", command=self._on_fly).pack(side="left", padx=6)

        self._stats = tk.Label(self.root, text="", justify="left", font=("Consolas", 10))
        self._stats.pack(padx=10, pady=8)

    def _send(self, command) -> None:
        if self.on_command is not None:
            self.on_command(command)

    def _touch(self, event: TouchEvent) -> None:
        if self.on_touch is not None:
            self.on_touch(event)

    def _on_mode_toggled(self) -> None:
        self._send(ModeSwitch(manual=int(self._var_manual.get()) == 1))

    def _on_pad_drag(self, event) -> None:
        r = _PAD_SIZE / 2
        dx = float(event.x) - r
        dy = r - float(event.y)
        dist = math.hypot(dx, dy)
        progress = min(1.0, dist / r)
        angle = math.atan2(dy, dx)
        kx = r + math.cos(angle) * progress * r
        ky = r - math.sin(angle) * progress * r
        self._pad.coords(self._knob, kx - 8, ky - 8, kx + 8, ky + 8)
        self._send(RotateDrag(angle=angle, progress=progress))

    def _on_pad_release(self, _event) -> None:
        r = _PAD_SIZE / 2
        self._pad.coords(self._knob, r - 8, r - 8, r + 8, r + 8)
        self._send(RotateDrag(angle=0.0, progress=0.0))

    def _on_fly(self) -> None:
        try:
            xyz = tuple(float(v.get()) for v in self._var_fly)
        except ValueError:
            self.set_status("fly-to: x/y/z must be numbers")
            return
        self._send(FlyTo(position=xyz))

    def _handle_close(self) -> None:
        self._closed = True
        self.root.destroy()

    def _read_sliders(self) -> np.ndarray:
        return euler_yaw_pitch_roll_to_q(
            float(self._var_yaw.get()),
            float(self._var_pitch.get()),
            float(self._var_roll.get()),
        )

    def _calibrate(self) -> None:
        if not self._closed:
            self._publish_sample(self._read_sliders())

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.root.after(self.calibration_delay_ms, self._calibrate)

    def set_status(self, text: str) -> None:
        if not self._closed:
            self._stats.config(text=text)

    def run(self, on_tick):
        self._on_tick = on_tick
        self.start()
        self.root.after(self.frame_ms, self._tick)
        self.root.mainloop()

    def _tick(self) -> None:
        if self._closed:
            return
        if self.has_sample():
            self._publish_sample(self._read_sliders())
        if self._on_tick is not None:
            self._on_tick()
        self.root.after(self.frame_ms, self._tick)

    def close(self) -> None:
        if not self._closed:
            self._handle_close()
