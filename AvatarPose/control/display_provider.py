"""Display providers for rendering runtime controller state."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..math3d.coords import heading_pitch_deg
from .orientation_source import OrientationSource
from .pose import CameraPose

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DisplayFrame:
    """Runtime frame data shared by all display providers."""

    position: np.ndarray
    camera: Optional[CameraPose]
    mode: str
    calibrated: bool
    locomoting: bool
    flying: bool


class DisplayProvider:
    """Base display provider interface."""

    def update(self, frame: DisplayFrame) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class NullDisplayProvider(DisplayProvider):
    def update(self, frame: DisplayFrame) -> None:  # noqa: ARG002
        return


def _heading_pitch(frame: DisplayFrame) -> tuple[float, float]:
    if frame.camera is None:
        return 0.0, 0.0
    return heading_pitch_deg(frame.camera.front)


def _status_lines(frame: DisplayFrame) -> list[str]:
    p = frame.position
    heading, pitch = _heading_pitch(frame)
    return [
        f"mode            = {frame.mode}  (calibrated={frame.calibrated})",
        f"position xyz    = [{p[0]: .3f}, {p[1]: .3f}, {p[2]: .3f}]",
        f"heading/pitch   = ({heading:7.2f} deg, {pitch:7.2f} deg)",
        f"walking={frame.locomoting}  flying={frame.flying}",
    ]


class _TerminalPanel:
    """Redraws a block of status lines in place, or logs one line per frame.

    In-place redraw needs a tty; anything else degrades to scroll logging.
    """

    def __init__(self, cli_output: str, stream=None):
        self.stream = stream if stream is not None else sys.stderr
        isatty = getattr(self.stream, "isatty", None)
        self.live = cli_output == "live" and bool(isatty and isatty())
        self._drawn = 0

    def show(self, lines: list[str], scroll_line: str) -> None:
        if self.live:
            self._redraw(lines)
        else:
            logger.info(scroll_line)

    def _redraw(self, lines: list[str]) -> None:
        if self._drawn:
            # cursor up to the first line of the previous block
            self.stream.write(f"\x1b[{self._drawn}F")
        padded = lines + [""] * max(0, self._drawn - len(lines))
        self.stream.write("".join(f"\x1b[2K{line}\n" for line in padded))
        self.stream.flush()
        self._drawn = len(lines)


class TuiDisplayProvider(DisplayProvider):
    """Terminal + source UI text display provider."""

    def __init__(self, source: OrientationSource, cli_output: str = "live", stream=None):
        self.source = source
        self.panel = _TerminalPanel(cli_output, stream=stream)

    def update(self, frame: DisplayFrame) -> None:
        p = frame.position
        heading, pitch = _heading_pitch(frame)

        self.source.set_status("\n".join(_status_lines(frame)))

        self.panel.show(
            lines=["AvatarPose Live Scene", *_status_lines(frame)],
            scroll_line=(
                "[POSE] mode=%s xyz=(%.3f, %.3f, %.3f) heading_pitch=(%.2f, %.2f) "
                "walking=%s flying=%s"
                % (
                    frame.mode,
                    p[0],
                    p[1],
                    p[2],
                    heading,
                    pitch,
                    frame.locomoting,
                    frame.flying,
                )
            ),
        )
