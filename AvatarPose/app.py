"""
Avatar pose demo:
- Orientation source (Tk panel sliders or UDP sensor bridge)
- Manual rocker rotation, mode switch, reset and fly-to commands
- Pose controller fuses them into a camera look-at + 7-float pose record
- Pose sink (optional UDP broadcast of the pose record)
- Display provider (tui) renders controller state from the camera-moved feed

Deps:
  uv add numpy pyyaml
"""

from __future__ import annotations

import logging

import numpy as np

from .config import parse_args
from .control.controller import PoseController
from .control.display_provider import DisplayFrame, NullDisplayProvider, TuiDisplayProvider
from .control.pose_sink import UdpPoseSink
from .control.render_binding import LookAtRecorder
from .sources.udp_bridge import UdpBridgeOrientationSource

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class _InputRelay:
    """Forwards UI input to a controller created after the source."""

    def __init__(self):
        self.controller: PoseController | None = None

    def command(self, command) -> None:
        if self.controller is not None:
            self.controller.submit(command)

    def touch(self, event) -> None:
        if self.controller is not None:
            self.controller.on_touch(event)


def build_orientation_source(cfg, relay: _InputRelay):
    if cfg.source == "udp":
        return UdpBridgeOrientationSource(
            host=cfg.udp_host,
            port=cfg.udp_port,
            poll_ms=cfg.frame_ms,
            on_command=relay.command,
            on_touch=relay.touch,
        )

    try:
        if cfg.source == "tk":
            from .sources.tk_panel import TkPanelOrientationSource

            return TkPanelOrientationSource(
                title="AvatarPose - Control Panel",
                frame_ms=cfg.frame_ms,
                calibration_delay_ms=cfg.calibration_delay_ms,
                on_command=relay.command,
                on_touch=relay.touch,
            )
        raise RuntimeError(f"Unsupported orientation source: {cfg.source}")
    except (ImportError, RuntimeError):
        logger.exception("[SENSOR] failed to init requested orientation source")
        logger.warning("[SENSOR] fallback to UDP bridge on %s:%s", cfg.udp_host, cfg.udp_port)
        return UdpBridgeOrientationSource(
            host=cfg.udp_host,
            port=cfg.udp_port,
            poll_ms=cfg.frame_ms,
            on_command=relay.command,
            on_touch=relay.touch,
        )


def build_pose_sink(cfg):
    if cfg.pose_sink == "none":
        return None
    if cfg.pose_sink == "udp":
        return UdpPoseSink(cfg.pose_sink_host, cfg.pose_sink_port)
    raise RuntimeError(f"Unsupported pose sink: {cfg.pose_sink}")


def build_display_provider(cfg, source):
    if cfg.display_provider == "tui":
        return TuiDisplayProvider(source=source, cli_output=cfg.cli_output)
    if cfg.display_provider == "none":
        return NullDisplayProvider()
    raise RuntimeError(f"Unsupported display provider: {cfg.display_provider}")


def main(argv=None):
    cfg = parse_args(argv)
    configure_logging(cfg.log_level)

    relay = _InputRelay()
    source = build_orientation_source(cfg, relay)
    pose_sink = build_pose_sink(cfg)
    display_provider = build_display_provider(cfg, source)
    camera = LookAtRecorder()

    controller: PoseController | None = None

    def on_camera_moved(position: np.ndarray) -> None:
        display_provider.update(
            DisplayFrame(
                position=position,
                camera=camera.last,
                mode=controller.mode.value,
                calibrated=controller.calibrated,
                locomoting=controller.is_locomoting,
                flying=controller.flight is not None,
            )
        )

    controller = PoseController(
        orientation_source=source,
        camera=camera,
        on_pose=pose_sink,
        on_camera_moved=on_camera_moved,
        config=cfg.controller_config(),
        initial_position=np.array([cfg.start_x, cfg.start_y, cfg.start_z], dtype=np.float64),
    )
    relay.controller = controller
    logger.info(
        "[SCENE] source=%s pose_sink=%s frame_hz=%.1f move_speed=%.2f",
        source.name,
        cfg.pose_sink,
        cfg.frame_hz,
        cfg.move_speed,
    )

    try:
        source.run(controller.update)
    except KeyboardInterrupt:
        logger.info("[SCENE] interrupted")
    finally:
        try:
            controller.release()
            source.close()
        finally:
            display_provider.close()
            if pose_sink is not None:
                pose_sink.close()


if __name__ == "__main__":
    main()
