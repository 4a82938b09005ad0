"""
Camera pose model.

Maintains the body/camera pose from joint angles and inertial sensors and
converts between pixel coordinates and robot-relative field geometry.

Frames:
    robot: origin on the ground below the torso, x forward, y left, z up [cm].
    camera: origin at the lens, x along the optical axis, y left, z up.
    image: u right, v down, origin top-left [px].
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Sequence

import numpy as np

from . import field_geometry as fg
from .config import VisionConfig
from .errors import DegenerateProjection, InvalidSensorArity
from .fv_types import (
    CalibrationParams,
    Estimate,
    Horizon,
    LinePoint,
    PoseState,
    ScanDirection,
    VisualLine,
)
from .kinematics import (
    ANGLE_X,
    ANGLE_Y,
    CAMERA_OFFSET_X,
    CAMERA_OFFSET_Z,
    CAMERA_PITCH,
    HEAD_PITCH,
    HEAD_YAW,
    NECK_OFFSET_Z,
    NUM_JOINTS,
    NUM_SENSORS,
    torso_height,
)
from .transforms import (
    X_AXIS,
    Y_AXIS,
    Z_AXIS,
    apply_transform,
    chain,
    invert_transform,
    rotation_about,
    translation,
)

NEAR_PLANE_CM = 1.0
_EPS = 1e-9


class PoseModel:
    def __init__(
        self,
        config: Optional[VisionConfig] = None,
        calibration: Optional[CalibrationParams] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config or VisionConfig()
        self.logger = logger or logging.getLogger("field_vision.pose")

        self.width = self.config.image_width
        self.height = self.config.image_height
        self.fx = (self.width / 2.0) / math.tan(math.radians(self.config.fov_x_deg) / 2.0)
        self.fy = (self.height / 2.0) / math.tan(math.radians(self.config.fov_y_deg) / 2.0)
        self.cx = (self.width - 1) / 2.0
        self.cy = (self.height - 1) / 2.0

        self._calibration = calibration or CalibrationParams()
        self._state = PoseState(
            joints=(0.0,) * NUM_JOINTS,
            sensors=(0.0,) * NUM_SENSORS,
        )
        self._geometry = self._build_geometry(self._state, self._calibration)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def state(self) -> PoseState:
        return self._state

    @property
    def camera_to_robot(self) -> np.ndarray:
        return self._geometry[0].copy()

    def update_sensors(self, joints: Sequence[float], sensors: Sequence[float]) -> PoseState:
        """
        Replace the body state for the coming frame.

        Sensor vectors shorter than the canonical length come from older
        frame formats; the missing tail is filled with zeros.
        """
        j = np.asarray(joints, dtype=np.float64).ravel()
        if j.size != NUM_JOINTS:
            raise InvalidSensorArity(f"expected {NUM_JOINTS} joint angles, got {j.size}")
        s = np.asarray(sensors, dtype=np.float64).ravel()
        if s.size > NUM_SENSORS:
            raise InvalidSensorArity(f"expected at most {NUM_SENSORS} sensor values, got {s.size}")
        if s.size < NUM_SENSORS:
            s = np.concatenate([s, np.zeros(NUM_SENSORS - s.size)])

        state = PoseState(
            joints=tuple(j.tolist()),
            sensors=tuple(s.tolist()),
            body_roll=float(s[ANGLE_X]),
            body_pitch=float(s[ANGLE_Y]),
        )
        self._geometry = self._build_geometry(state, self._calibration)
        self._state = state
        return state

    def calibration(self) -> CalibrationParams:
        return self._calibration

    def set_calibration(self, params: CalibrationParams | Sequence[float]) -> CalibrationParams:
        if not isinstance(params, CalibrationParams):
            params = CalibrationParams.from_sequence(params)
        self._geometry = self._build_geometry(self._state, params)
        self._calibration = params
        return params

    @staticmethod
    def _build_geometry(state: PoseState, calib: CalibrationParams) -> tuple[np.ndarray, np.ndarray]:
        j = state.joints
        T = chain(
            translation(0.0, 0.0, torso_height(j)),
            rotation_about(X_AXIS, state.body_roll),
            rotation_about(Y_AXIS, state.body_pitch),
            translation(0.0, 0.0, NECK_OFFSET_Z + calib.neck_offset_z),
            rotation_about(Z_AXIS, j[HEAD_YAW] + calib.head_pan),
            rotation_about(Y_AXIS, j[HEAD_PITCH] + calib.head_pitch),
            translation(
                CAMERA_OFFSET_X + calib.camera_off_x,
                calib.camera_off_y,
                CAMERA_OFFSET_Z + calib.camera_off_z,
            ),
            rotation_about(Y_AXIS, CAMERA_PITCH + calib.camera_pitch),
            rotation_about(Z_AXIS, calib.camera_pan),
            rotation_about(X_AXIS, calib.camera_roll),
        )
        return T, invert_transform(T)

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------
    def _ray(self, px: float, py: float) -> np.ndarray:
        return np.array([1.0, (self.cx - px) / self.fx, (self.cy - py) / self.fy])

    def _intersect(self, px: float, py: float, object_height: float) -> tuple[np.ndarray, np.ndarray]:
        T = self._geometry[0]
        origin = T[:3, 3]
        d = T[:3, :3] @ self._ray(px, py)
        if d[2] >= -_EPS:
            raise DegenerateProjection(f"pixel ({px}, {py}) looks at or above the horizon")
        if origin[2] <= object_height:
            raise DegenerateProjection("camera is not above the object plane")
        t = (object_height - origin[2]) / d[2]
        return origin + t * d, d

    def pixel_to_estimate(self, px: float, py: float, object_height: float = 0.0) -> Estimate:
        """
        Inverse-project a pixel onto the plane z = object_height.

        Returns Estimate.null() when the viewing ray never reaches the plane.
        """
        try:
            point, d = self._intersect(float(px), float(py), float(object_height))
        except DegenerateProjection as exc:
            self.logger.debug("no estimate: %s", exc)
            return Estimate.null()

        x, y = float(point[0]), float(point[1])
        return Estimate(
            distance=math.hypot(x, y),
            elevation=math.atan2(d[2], math.hypot(d[0], d[1])),
            bearing=math.atan2(y, x),
            x=x,
            y=y,
        )

    def project(self, point: Sequence[float]) -> Optional[tuple[float, float]]:
        """Pixel of a robot-relative 3-D point, or None behind the camera."""
        pc = apply_transform(self._geometry[1], point)
        if pc[0] <= NEAR_PLANE_CM:
            return None
        return (
            self.cx - self.fx * pc[1] / pc[0],
            self.cy - self.fy * pc[2] / pc[0],
        )

    def horizon(self) -> Horizon:
        r20, r21, r22 = self._geometry[0][2, :3]
        far_above, far_below = -4 * self.height, 5 * self.height

        def row(u: float) -> int:
            if abs(r22) < _EPS:
                return far_above if r20 < 0 else far_below
            v = self.cy + self.fy * (r20 + r21 * (self.cx - u) / self.fx) / r22
            return int(round(min(max(v, far_above), far_below)))

        left = (0, row(0))
        right = (self.width - 1, row(self.width - 1))
        vision = min(max(min(left[1], right[1]), 0), self.height)
        return Horizon(left=left, right=right, vision_horizon=vision)

    # ------------------------------------------------------------------
    # Expected field lines
    # ------------------------------------------------------------------
    def predict_visual_lines(self, x: float, y: float, heading: float) -> list[VisualLine]:
        """
        Field lines as they would appear from robot pose (x, y, heading).

        Each field segment is sampled at a fixed ground step; samples in
        front of the camera and inside the image make up the line.
        """
        robot_from_field = invert_transform(
            translation(x, y, 0.0) @ rotation_about(Z_AXIS, heading)
        )
        world_to_camera = self._geometry[1]
        step = max(self.config.lines.expected_line_step_cm, 1e-3)

        lines: list[VisualLine] = []
        for (ax, ay), (bx, by) in fg.FIELD_LINES:
            a = apply_transform(robot_from_field, (ax, ay, 0.0))
            b = apply_transform(robot_from_field, (bx, by, 0.0))
            n = max(1, int(math.ceil(math.hypot(bx - ax, by - ay) / step)))

            samples = []
            for i in range(n + 1):
                pc = apply_transform(world_to_camera, a + (b - a) * (i / n))
                if pc[0] <= NEAR_PLANE_CM:
                    continue
                u = self.cx - self.fx * pc[1] / pc[0]
                v = self.cy - self.fy * pc[2] / pc[0]
                if not (0 <= u < self.width and 0 <= v < self.height):
                    continue
                samples.append((u, v, self.fx * fg.LINE_WIDTH / pc[0]))

            if len(samples) < 2:
                continue
            du = abs(samples[-1][0] - samples[0][0])
            dv = abs(samples[-1][1] - samples[0][1])
            scan = ScanDirection.VERTICAL if du >= dv else ScanDirection.HORIZONTAL
            points = [LinePoint(u, v, w, scan) for u, v, w in samples]
            lines.append(VisualLine(points[0], points[-1], points))
        return lines
