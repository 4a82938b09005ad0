"""Passive data structures exchanged between the vision stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional, Sequence


class ColorClass(IntEnum):
    """Semantic color codes stored in the color table and classified map."""

    UNDEFINED = 0  # grey
    WHITE = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    ORANGE = 5
    YELLOW_WHITE = 6
    BLUE_GREEN = 7
    ORANGE_RED = 8
    ORANGE_YELLOW = 9
    RED = 10
    NAVY = 11


NUM_COLORS = len(ColorClass)


@dataclass(frozen=True)
class Frame:
    idx: int
    data: bytes
    width: int
    height: int
    pixel_format: str = "yuyv"


@dataclass(frozen=True)
class CalibrationParams:
    """
    Camera calibration corrections, in the order used by the 9-value buffers.

    Angles are radians, offsets are centimeters.
    """

    camera_roll: float = 0.0
    camera_pitch: float = 0.0
    camera_pan: float = 0.0
    camera_off_x: float = 0.0
    camera_off_y: float = 0.0
    camera_off_z: float = 0.0
    head_pan: float = 0.0
    head_pitch: float = 0.0
    neck_offset_z: float = 0.0

    FIELDS = (
        "camera_roll",
        "camera_pitch",
        "camera_pan",
        "camera_off_x",
        "camera_off_y",
        "camera_off_z",
        "head_pan",
        "head_pitch",
        "neck_offset_z",
    )

    @classmethod
    def from_sequence(cls, values: Sequence[float]) -> "CalibrationParams":
        vals = [float(v) for v in values]
        if len(vals) != len(cls.FIELDS):
            raise ValueError(
                f"calibration needs {len(cls.FIELDS)} values, got {len(vals)}"
            )
        return cls(*vals)

    def as_list(self) -> list[float]:
        return [float(getattr(self, name)) for name in self.FIELDS]


@dataclass(frozen=True)
class PoseState:
    joints: tuple[float, ...]
    sensors: tuple[float, ...]
    body_roll: float = 0.0
    body_pitch: float = 0.0


@dataclass(frozen=True)
class Estimate:
    """
    Field-relative result of an inverse projection.

    Attributes:
        distance: Ground distance from the robot [cm].
        elevation: Angle of the viewing ray above the horizontal [rad].
        bearing: Angle to the left of straight ahead [rad].
        x: Forward position relative to the robot [cm].
        y: Leftward position relative to the robot [cm].
        valid: False for the sentinel returned on degenerate geometry.

    """

    distance: float
    elevation: float
    bearing: float
    x: float
    y: float
    valid: bool = True

    @classmethod
    def null(cls) -> "Estimate":
        return cls(0.0, 0.0, 0.0, 0.0, 0.0, valid=False)

    def as_list(self) -> list[float]:
        return [self.distance, self.elevation, self.bearing, self.x, self.y]


class LandmarkKind(IntEnum):
    """Closed set of landmark identities; values are the transport codes."""

    BALL = 0
    BLUE_GOAL_LEFT_POST = 40
    BLUE_GOAL_RIGHT_POST = 41
    YELLOW_GOAL_LEFT_POST = 42
    YELLOW_GOAL_RIGHT_POST = 43
    BLUE_GOAL_POST = 44
    YELLOW_GOAL_POST = 45
    BLUE_CROSSBAR = 46
    YELLOW_CROSSBAR = 47
    CENTER_CROSS = 48


@dataclass
class Landmark:
    kind: LandmarkKind
    left_top: tuple[int, int]
    right_top: tuple[int, int]
    left_bottom: tuple[int, int]
    right_bottom: tuple[int, int]
    width: float
    height: float
    center: Optional[tuple[float, float]] = None
    radius: float = 0.0
    estimate: Optional[Estimate] = None

    @classmethod
    def from_box(cls, kind: LandmarkKind, x: int, y: int, w: int, h: int) -> "Landmark":
        x, y, w, h = int(x), int(y), int(w), int(h)
        return cls(
            kind=kind,
            left_top=(x, y),
            right_top=(x + w, y),
            left_bottom=(x, y + h),
            right_bottom=(x + w, y + h),
            width=float(w),
            height=float(h),
        )

    @property
    def code(self) -> int:
        return int(self.kind)

    @property
    def bottom_center(self) -> tuple[float, float]:
        return (
            (self.left_bottom[0] + self.right_bottom[0]) / 2.0,
            (self.left_bottom[1] + self.right_bottom[1]) / 2.0,
        )


class ScanDirection(IntEnum):
    VERTICAL = 0
    HORIZONTAL = 1


@dataclass(frozen=True)
class LinePoint:
    x: float
    y: float
    line_width: float
    found_with_scan: ScanDirection


@dataclass
class VisualLine:
    start: LinePoint
    end: LinePoint
    points: list[LinePoint] = field(default_factory=list)

    @classmethod
    def from_points(cls, points: Sequence[LinePoint]) -> "VisualLine":
        """Order points along the line's dominant image axis and take the extremes."""
        pts = list(points)
        xs = [p.x for p in pts]
        ys = [p.y for p in pts]
        if (max(xs) - min(xs)) >= (max(ys) - min(ys)):
            pts.sort(key=lambda p: (p.x, p.y))
        else:
            pts.sort(key=lambda p: (p.y, p.x))
        return cls(pts[0], pts[-1], pts)


class CornerShape(IntEnum):
    L = 0
    T = 1
    X = 2


@dataclass(frozen=True)
class VisualCorner:
    x: float
    y: float
    distance: float
    bearing: float
    shape: CornerShape
    lines: tuple[int, int] = (-1, -1)


@dataclass(frozen=True)
class Horizon:
    left: tuple[int, int]
    right: tuple[int, int]
    vision_horizon: int


@dataclass
class SceneResult:
    frame_idx: int
    process_time_us: int
    classified: Any  # (H, W) uint8 ndarray
    debug: Any  # (H, W) uint8 ndarray
    ball: Optional[Landmark]
    field_objects: dict[LandmarkKind, Landmark]
    lines: list[VisualLine]
    unused_points: list[LinePoint]
    corners: list[VisualCorner]
    horizon: Horizon

    @property
    def landmarks(self) -> list[Landmark]:
        out = [self.ball] if self.ball is not None else []
        out.extend(self.field_objects[k] for k in sorted(self.field_objects))
        return out
