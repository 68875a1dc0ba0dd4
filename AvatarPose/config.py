"""CLI config and defaults."""

from __future__ import annotations

import argparse
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from .control.controller import ControllerConfig


@dataclass(frozen=True)
class AppConfig:
    source: str = "tk"
    udp_host: str = "127.0.0.1"
    udp_port: int = 24568
    frame_hz: float = 60.0
    calibration_delay_ms: int = 300
    move_speed: float = 5.0
    flight_duration: float = 2.0
    flight_max_height: float = 5.0
    angular_step_deg: float = 2.0
    fly_near_threshold: float = 2.0
    camera_notify_every: int = 10
    calibration_warn_s: float = 2.0
    start_x: float = 0.0
    start_y: float = 0.0
    start_z: float = 0.0
    pose_sink: str = "none"
    pose_sink_host: str = "127.0.0.1"
    pose_sink_port: int = 24569
    display_provider: str = "tui"
    cli_output: str = "live"
    log_level: str = "info"

    def controller_config(self) -> ControllerConfig:
        return ControllerConfig(
            move_speed=self.move_speed,
            flight_duration=self.flight_duration,
            flight_max_height=self.flight_max_height,
            angular_step_per_unit=math.radians(self.angular_step_deg),
            fly_near_threshold=self.fly_near_threshold,
            camera_notify_every=self.camera_notify_every,
            calibration_warn_s=self.calibration_warn_s,
        )

    @property
    def frame_ms(self) -> int:
        return max(1, int(round(1000.0 / self.frame_hz)))


_APP_CONFIG_FIELDS = {f.name for f in fields(AppConfig)}
_INT_FIELDS = {
    "udp_port",
    "calibration_delay_ms",
    "camera_notify_every",
    "pose_sink_port",
}
_FLOAT_FIELDS = {
    "frame_hz",
    "move_speed",
    "flight_duration",
    "flight_max_height",
    "angular_step_deg",
    "fly_near_threshold",
    "calibration_warn_s",
    "start_x",
    "start_y",
    "start_z",
}
_STRING_FIELDS = {
    "source",
    "udp_host",
    "pose_sink",
    "pose_sink_host",
    "display_provider",
    "cli_output",
    "log_level",
}


def _coerce_config_value(key: str, value: Any) -> Any:
    try:
        if key in _INT_FIELDS:
            if isinstance(value, bool):
                raise TypeError("bool is not an int")
            return int(value)
        if key in _FLOAT_FIELDS:
            if isinstance(value, bool):
                raise TypeError("bool is not a float")
            return float(value)
        if key in _STRING_FIELDS:
            return "" if value is None else str(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid value for config key '{key}': {value!r}") from exc
    raise ValueError(f"unsupported config key '{key}'")


def _normalize_config_key(raw_key: Any) -> str:
    if not isinstance(raw_key, str):
        raise ValueError(f"config key must be string, got {type(raw_key).__name__}")
    key = raw_key.strip().replace("-", "_")
    if not key:
        raise ValueError("config key cannot be empty")
    return key


def _load_yaml_config(path: str) -> dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ValueError(f"--config file not found: {p}")
    if not p.is_file():
        raise ValueError(f"--config must point to a file: {p}")

    try:
        text = p.read_text(encoding="utf-8")
    except OSError as exc:
        raise ValueError(f"failed to read --config file {p}: {exc}") from exc
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"failed to parse YAML config {p}: {exc}") from exc

    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ValueError(f"--config root must be a mapping/object, got {type(loaded).__name__}")

    normalized: dict[str, Any] = {}
    for raw_key, raw_value in loaded.items():
        key = _normalize_config_key(raw_key)
        if key not in _APP_CONFIG_FIELDS:
            raise ValueError(f"unknown config key in {p}: {raw_key!r}")
        normalized[key] = _coerce_config_value(key, raw_value)
    return normalized


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="avatarpose")
    ap.add_argument(
        "--config",
        type=str,
        default="",
        help="YAML config file path. CLI args override YAML values.",
    )
    ap.add_argument(
        "--source",
        choices=["tk", "udp"],
        default="tk",
        help="Orientation source: Tk control panel sliders or UDP sensor bridge.",
    )
    ap.add_argument("--udp-host", type=str, default="127.0.0.1", help="Bridge bind host.")
    ap.add_argument("--udp-port", type=int, default=24568, help="Bridge bind port.")
    ap.add_argument(
        "--frame-hz",
        type=float,
        default=60.0,
        help="Frame rate of the update loop.",
    )
    ap.add_argument(
        "--calibration-delay-ms",
        type=int,
        default=300,
        help="Delay before the Tk panel delivers its first (calibration) sample.",
    )
    ap.add_argument(
        "--move-speed",
        type=float,
        default=5.0,
        help="Walking speed in scene units per second.",
    )
    ap.add_argument(
        "--flight-duration",
        type=float,
        default=2.0,
        help="Fly-to animation duration in seconds.",
    )
    ap.add_argument(
        "--flight-max-height",
        type=float,
        default=5.0,
        help="Peak height of the fly-to arc.",
    )
    ap.add_argument(
        "--angular-step-deg",
        type=float,
        default=2.0,
        help="Rotation per frame at full rocker deflection (deg).",
    )
    ap.add_argument(
        "--fly-near-threshold",
        type=float,
        default=2.0,
        help="Fly-to targets at or within this distance are ignored.",
    )
    ap.add_argument(
        "--camera-notify-every",
        type=int,
        default=10,
        help="Emit the camera-moved notification every N frames.",
    )
    ap.add_argument(
        "--calibration-warn-s",
        type=float,
        default=2.0,
        help="Warn once when no orientation sample arrived after this many seconds.",
    )
    ap.add_argument("--start-x", type=float, default=0.0, help="Initial camera x.")
    ap.add_argument("--start-y", type=float, default=0.0, help="Initial camera y.")
    ap.add_argument("--start-z", type=float, default=0.0, help="Initial camera z.")
    ap.add_argument(
        "--pose-sink",
        choices=["none", "udp"],
        default="none",
        help="Where to send the 7-float pose record each frame.",
    )
    ap.add_argument("--pose-sink-host", type=str, default="127.0.0.1", help="Pose sink host.")
    ap.add_argument("--pose-sink-port", type=int, default=24569, help="Pose sink port.")
    ap.add_argument(
        "--display-provider",
        choices=["tui", "none"],
        default="tui",
        help="Status display: terminal TUI or disabled.",
    )
    ap.add_argument(
        "--cli-output",
        choices=["live", "scroll"],
        default="live",
        help="TUI output mode: in-place live panel or scrolling logs.",
    )
    ap.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default="info",
        help="Global log level.",
    )
    return ap


def _check_port(flag: str, port: int) -> None:
    if not (1 <= port <= 65535):
        raise ValueError(f"{flag} must be in [1,65535], got {port}")


def validate_config(cfg: AppConfig) -> None:
    if cfg.source not in {"tk", "udp"}:
        raise ValueError(f"--source must be one of tk|udp, got {cfg.source}")
    if not cfg.udp_host.strip():
        raise ValueError("--udp-host must be non-empty")
    _check_port("--udp-port", cfg.udp_port)
    if not (math.isfinite(cfg.frame_hz) and cfg.frame_hz > 0.0):
        raise ValueError(f"--frame-hz must be > 0, got {cfg.frame_hz}")
    if cfg.calibration_delay_ms < 0:
        raise ValueError(
            f"--calibration-delay-ms must be >= 0, got {cfg.calibration_delay_ms}"
        )
    if cfg.move_speed < 0.0:
        raise ValueError(f"--move-speed must be >= 0, got {cfg.move_speed}")
    if cfg.flight_duration <= 0.0:
        raise ValueError(f"--flight-duration must be > 0, got {cfg.flight_duration}")
    if not math.isfinite(cfg.flight_max_height):
        raise ValueError("--flight-max-height must be a finite number")
    if not math.isfinite(cfg.angular_step_deg):
        raise ValueError("--angular-step-deg must be a finite number")
    if cfg.fly_near_threshold < 0.0:
        raise ValueError(
            f"--fly-near-threshold must be >= 0, got {cfg.fly_near_threshold}"
        )
    if cfg.camera_notify_every <= 0:
        raise ValueError(
            f"--camera-notify-every must be > 0, got {cfg.camera_notify_every}"
        )
    if cfg.calibration_warn_s < 0.0:
        raise ValueError(
            f"--calibration-warn-s must be >= 0, got {cfg.calibration_warn_s}"
        )
    if not all(math.isfinite(v) for v in (cfg.start_x, cfg.start_y, cfg.start_z)):
        raise ValueError("--start-x/--start-y/--start-z must be finite numbers")
    if cfg.pose_sink not in {"none", "udp"}:
        raise ValueError(f"--pose-sink must be one of none|udp, got {cfg.pose_sink}")
    if cfg.pose_sink == "udp":
        if not cfg.pose_sink_host.strip():
            raise ValueError("--pose-sink-host must be non-empty")
        _check_port("--pose-sink-port", cfg.pose_sink_port)
    if cfg.display_provider not in {"tui", "none"}:
        raise ValueError(
            f"--display-provider must be one of tui|none, got {cfg.display_provider}"
        )
    if cfg.cli_output not in {"live", "scroll"}:
        raise ValueError(f"--cli-output must be live|scroll, got {cfg.cli_output}")
    if cfg.log_level not in {"debug", "info", "warning", "error"}:
        raise ValueError(
            f"--log-level must be one of debug|info|warning|error, got {cfg.log_level}"
        )


def parse_args(argv=None) -> AppConfig:
    bootstrap = argparse.ArgumentParser(add_help=False)
    bootstrap.add_argument("--config", type=str, default="")
    bootstrap_ns, _ = bootstrap.parse_known_args(argv)

    yaml_cfg: dict[str, Any] = {}
    yaml_error: Optional[str] = None
    if bootstrap_ns.config:
        try:
            yaml_cfg = _load_yaml_config(bootstrap_ns.config)
        except ValueError as exc:
            yaml_error = str(exc)

    ap = build_arg_parser()
    if yaml_error is not None:
        ap.error(yaml_error)
    if yaml_cfg:
        ap.set_defaults(**yaml_cfg)
    args = ap.parse_args(argv)

    cfg = AppConfig(**{name: getattr(args, name) for name in _APP_CONFIG_FIELDS})
    try:
        validate_config(cfg)
    except ValueError as exc:
        ap.error(str(exc))
    return cfg
