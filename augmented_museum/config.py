from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Optional

from museum_pipeline.errors import ConfigError
from museum_pipeline.keys import KeyBindings


@dataclass
class KeyConfig:
    """Single-character keyboard commands."""

    quit: str = "q"
    screenshot: str = "s"
    cycle_left: str = "a"
    cycle_right: str = "d"

    def bindings(self) -> KeyBindings:
        return KeyBindings(self.quit, self.screenshot, self.cycle_left, self.cycle_right)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class MuseumConfig:
    camera_name: str = "cam"
    device: int | str = 0
    fps: int = 30
    width: int = 0  # 0 keeps the camera default
    height: int = 0
    calibration_path: str = "bin/calibration.xml"
    images_path: str = "bin/paintings"
    screenshot_dir: str = "img"
    aruco_dict: str = "6x6_250"
    marker_length: float = 200.0
    overlay_policy: str = "single"  # "single" or "multi"
    overlay_strategy: str = "pose"  # "pose" or "corners"
    overlay_width: int = 560
    overlay_height: int = 720
    overlay_scale: float = 1.0
    key_timeout_ms: int = 10
    window_name: str = "Main Window"
    create_marker: bool = False
    dry_run: bool = False
    max_frames: Optional[int] = None
    log_path: Optional[str] = None
    keys: KeyConfig = field(default_factory=KeyConfig)

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_overrides(self, **kwargs: Any) -> "MuseumConfig":
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        return self


def _load_yaml(path: Path) -> dict[str, Any]:
    try:
        import yaml  # type: ignore
    except Exception as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "YAML config requested but PyYAML is not installed. "
            "Install with: pip install pyyaml"
        ) from exc
    with path.open("r", encoding="utf-8") as fp:
        try:
            return yaml.safe_load(fp) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Malformed YAML config {path}: {exc}") from exc


def _normalize_device(value: Any) -> int | str:
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


def _validate_choice(name: str, value: str, choices: set[str]) -> str:
    value = str(value).strip().lower()
    if value not in choices:
        raise ValueError(f"{name} must be one of {sorted(choices)}, got {value!r}")
    return value


def _single_char(name: str, value: Any) -> str:
    s = str(value)
    if len(s) != 1:
        raise ValueError(f"key binding {name} must be a single character, got {s!r}")
    return s


def load_config(path: str | Path) -> MuseumConfig:
    """
    Read a JSON or YAML config file.

    Raises:
        ConfigError: the file cannot be read or holds invalid values
    """
    p = Path(path)
    if not p.is_file():
        raise ConfigError(f"Config not found: {p}")

    try:
        if p.suffix.lower() in {".yaml", ".yml"}:
            raw = _load_yaml(p)
        else:
            with p.open("r", encoding="utf-8") as fp:
                raw = json.load(fp)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Failed to read config {p}: {exc}") from exc

    try:
        return _from_raw(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid config {p}: {exc}") from exc


def _from_raw(raw: Any) -> MuseumConfig:
    if not isinstance(raw, dict):
        raise ValueError("Config root must be a JSON/YAML object")

    cfg = MuseumConfig()
    cfg.camera_name = str(raw.get("camera_name", cfg.camera_name))
    cfg.device = _normalize_device(raw.get("device", cfg.device))
    cfg.fps = int(raw.get("fps", cfg.fps))
    cfg.width = int(raw.get("width", cfg.width))
    cfg.height = int(raw.get("height", cfg.height))
    cfg.calibration_path = str(raw.get("calibration_path", cfg.calibration_path))
    cfg.images_path = str(raw.get("images_path", cfg.images_path))
    cfg.screenshot_dir = str(raw.get("screenshot_dir", cfg.screenshot_dir))
    cfg.aruco_dict = str(raw.get("aruco_dict", cfg.aruco_dict))
    cfg.marker_length = float(raw.get("marker_length", cfg.marker_length))
    if cfg.marker_length <= 0:
        raise ValueError("marker_length must be positive")
    cfg.overlay_policy = _validate_choice(
        "overlay_policy", raw.get("overlay_policy", cfg.overlay_policy), {"single", "multi"}
    )
    cfg.overlay_strategy = _validate_choice(
        "overlay_strategy", raw.get("overlay_strategy", cfg.overlay_strategy), {"pose", "corners"}
    )
    cfg.overlay_width = int(raw.get("overlay_width", cfg.overlay_width))
    cfg.overlay_height = int(raw.get("overlay_height", cfg.overlay_height))
    cfg.overlay_scale = float(raw.get("overlay_scale", cfg.overlay_scale))
    cfg.key_timeout_ms = int(raw.get("key_timeout_ms", cfg.key_timeout_ms))
    cfg.window_name = str(raw.get("window_name", cfg.window_name))
    cfg.create_marker = bool(raw.get("create_marker", cfg.create_marker))
    cfg.dry_run = bool(raw.get("dry_run", cfg.dry_run))
    cfg.max_frames = raw.get("max_frames", cfg.max_frames)
    if cfg.max_frames is not None:
        cfg.max_frames = int(cfg.max_frames)
    cfg.log_path = raw.get("log_path", cfg.log_path)

    keys_raw = raw.get("keys")
    if keys_raw is not None:
        if not isinstance(keys_raw, dict):
            raise ValueError("keys must be a mapping of command -> key")
        kc = KeyConfig()
        kc.quit = _single_char("quit", keys_raw.get("quit", kc.quit))
        kc.screenshot = _single_char("screenshot", keys_raw.get("screenshot", kc.screenshot))
        kc.cycle_left = _single_char("cycle_left", keys_raw.get("cycle_left", kc.cycle_left))
        kc.cycle_right = _single_char("cycle_right", keys_raw.get("cycle_right", kc.cycle_right))
        cfg.keys = kc

    return cfg
