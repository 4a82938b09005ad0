from __future__ import annotations

import json
from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Optional

import yaml


PIXEL_FORMATS = {"yuyv": 2, "yuv": 3}


@dataclass
class LandmarkConfig:
    """Thresholds for the blob-based landmark detector (pixels)."""

    min_ball_area: int = 6
    min_post_area: int = 30
    min_post_height: int = 10
    post_aspect: float = 1.5  # height / width
    post_kernel: int = 5  # vertical opening length
    min_crossbar_width: int = 15
    crossbar_aspect: float = 2.0  # width / height
    crossbar_kernel: int = 9  # horizontal opening length
    min_cross_area: int = 6
    max_cross_area: int = 200
    cross_fill_min: float = 0.2
    cross_fill_max: float = 0.75
    cross_green_ratio: float = 0.7

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class LineConfig:
    """Parameters of the scan-based line/corner detector (pixels unless noted)."""

    scan_spacing: int = 4
    min_line_width: int = 1
    max_line_width: int = 30
    max_point_gap: float = 12.0
    max_point_offset: float = 3.0
    min_points_per_line: int = 3
    merge_angle_deg: float = 10.0
    merge_distance: float = 4.0
    min_corner_angle_deg: float = 25.0
    corner_tolerance: float = 8.0
    corner_end_tolerance: float = 10.0
    expected_line_step_cm: float = 10.0

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class VisionConfig:
    robot_name: str = "nao"
    image_width: int = 320
    image_height: int = 240
    pixel_format: str = "yuyv"
    y_levels: int = 128
    u_levels: int = 128
    v_levels: int = 128
    fov_x_deg: float = 46.4
    fov_y_deg: float = 34.8
    frames_dir: str = "data/frames"
    table_path: Optional[str] = None
    calibration_path: Optional[str] = None
    session_root: str = "data/sessions"
    max_frames: Optional[int] = None
    save_annotated: bool = True
    debug_overlay: bool = False
    parallel_detection: bool = False
    log_level: str = "INFO"
    landmarks: LandmarkConfig = field(default_factory=LandmarkConfig)
    lines: LineConfig = field(default_factory=LineConfig)

    @property
    def bytes_per_pixel(self) -> int:
        return PIXEL_FORMATS[self.pixel_format]

    @property
    def image_byte_size(self) -> int:
        return self.image_width * self.image_height * self.bytes_per_pixel

    @property
    def table_size(self) -> int:
        return self.y_levels * self.u_levels * self.v_levels

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)

    def apply_overrides(self, **kwargs: Any) -> "VisionConfig":
        for key, value in kwargs.items():
            if value is not None and hasattr(self, key):
                setattr(self, key, value)
        return self


def _check(cfg: VisionConfig) -> VisionConfig:
    if cfg.pixel_format not in PIXEL_FORMATS:
        raise ValueError(f"Unknown pixel_format: {cfg.pixel_format}")
    if cfg.pixel_format == "yuyv" and cfg.image_width % 2:
        raise ValueError("yuyv frames need an even image_width")
    for name in ("y_levels", "u_levels", "v_levels"):
        levels = getattr(cfg, name)
        if levels < 1 or levels > 256 or levels & (levels - 1):
            raise ValueError(f"{name} must be a power of two in [1, 256]")
    return cfg


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    if not isinstance(data, dict):
        raise ValueError("YAML config root must be a mapping")
    return data


def _load_section(target, raw: Any):
    if raw is None:
        return target
    if not isinstance(raw, dict):
        raise ValueError(f"{type(target).__name__} section must be a mapping")
    for key, value in raw.items():
        if not hasattr(target, key):
            continue
        default = getattr(target, key)
        setattr(target, key, type(default)(value))
    return target


def load_config(path: str | Path) -> VisionConfig:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config not found: {p}")

    if p.suffix.lower() in {".yaml", ".yml"}:
        raw = _load_yaml(p)
    else:
        with p.open("r", encoding="utf-8") as fp:
            raw = json.load(fp)

    if not isinstance(raw, dict):
        raise ValueError("Config root must be a JSON/YAML object")

    cfg = VisionConfig()
    cfg.robot_name = str(raw.get("robot_name", cfg.robot_name))
    cfg.image_width = int(raw.get("image_width", cfg.image_width))
    cfg.image_height = int(raw.get("image_height", cfg.image_height))
    cfg.pixel_format = str(raw.get("pixel_format", cfg.pixel_format)).lower()
    cfg.y_levels = int(raw.get("y_levels", cfg.y_levels))
    cfg.u_levels = int(raw.get("u_levels", cfg.u_levels))
    cfg.v_levels = int(raw.get("v_levels", cfg.v_levels))
    cfg.fov_x_deg = float(raw.get("fov_x_deg", cfg.fov_x_deg))
    cfg.fov_y_deg = float(raw.get("fov_y_deg", cfg.fov_y_deg))
    cfg.frames_dir = str(raw.get("frames_dir", cfg.frames_dir))
    cfg.table_path = raw.get("table_path", cfg.table_path)
    cfg.calibration_path = raw.get("calibration_path", cfg.calibration_path)
    cfg.session_root = str(raw.get("session_root", cfg.session_root))
    cfg.max_frames = raw.get("max_frames", cfg.max_frames)
    if cfg.max_frames is not None:
        cfg.max_frames = int(cfg.max_frames)
    cfg.save_annotated = bool(raw.get("save_annotated", cfg.save_annotated))
    cfg.debug_overlay = bool(raw.get("debug_overlay", cfg.debug_overlay))
    cfg.parallel_detection = bool(raw.get("parallel_detection", cfg.parallel_detection))
    cfg.log_level = str(raw.get("log_level", cfg.log_level)).upper()

    cfg.landmarks = _load_section(LandmarkConfig(), raw.get("landmarks"))
    cfg.lines = _load_section(LineConfig(), raw.get("lines"))

    return _check(cfg)
