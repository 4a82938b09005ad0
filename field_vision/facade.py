import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence

import numpy as np

from .config import VisionConfig
from .errors import VisionError
from .fv_types import (
    CalibrationParams,
    Estimate,
    Frame,
    Landmark,
    LandmarkKind,
    SceneResult,
    VisualLine,
)
from .pose import PoseModel
from .strategies.color_table import ColorTable
from .strategies.field_lines import LineDetector
from .strategies.landmarks import LandmarkDetector
from .strategies.threshold import DEBUG_CLEAR, ThresholdEngine, overlay_debug

BALL_RADIUS_CM = 4.0


class VisionPipeline:
    """
    Per-frame orchestration of the vision stages around one explicit context.

    Frames are processed one at a time. Table reloads and calibration updates
    take the same lock, so they only ever land between two frames.
    """

    def __init__(
        self,
        config: VisionConfig,
        table: ColorTable,
        pose: PoseModel,
        thresh: ThresholdEngine,
        landmarks: LandmarkDetector,
        lines: LineDetector,
        logger: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.table = table
        self.pose = pose
        self.thresh = thresh
        self.landmarks = landmarks
        self.lines = lines
        self.log = logger or logging.getLogger("field_vision.pipeline")
        self._lock = threading.Lock()
        self._executor: Optional[ThreadPoolExecutor] = None
        if config.parallel_detection:
            self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="detect")

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ------------------------------------------------------------------
    # Between-frame updates
    # ------------------------------------------------------------------
    def reload_table(self, buffer) -> None:
        with self._lock:
            self.table.reload(buffer)
        self.log.info("color table reloaded (%d entries)", self.table.size)

    def set_calibration(self, params: CalibrationParams | Sequence[float]) -> CalibrationParams:
        with self._lock:
            params = self.pose.set_calibration(params)
        self.log.info("calibration updated: %s", params.as_list())
        return params

    def calibration(self) -> CalibrationParams:
        return self.pose.calibration()

    # ------------------------------------------------------------------
    # Geometry queries
    # ------------------------------------------------------------------
    def pixel_to_estimate(self, px: float, py: float, object_height: float = 0.0) -> Estimate:
        with self._lock:
            return self.pose.pixel_to_estimate(px, py, object_height)

    def predict_visual_lines(self, x: float, y: float, heading: float) -> list[VisualLine]:
        with self._lock:
            return self.pose.predict_visual_lines(x, y, heading)

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------
    def _attach_estimates(self, found: dict[LandmarkKind, Landmark]) -> None:
        for lm in found.values():
            if lm.kind == LandmarkKind.BALL and lm.center is not None:
                cx, cy = lm.center
                lm.estimate = self.pose.pixel_to_estimate(cx, cy, BALL_RADIUS_CM)
            else:
                bx, by = lm.bottom_center
                lm.estimate = self.pose.pixel_to_estimate(bx, by, 0.0)

    def process_frame(self, frame: Frame, joints: Sequence[float], sensors: Sequence[float]) -> SceneResult:
        with self._lock:
            try:
                return self._process(frame, joints, sensors)
            except VisionError as exc:
                self.log.warning("frame %d abandoned: %s", frame.idx, exc)
                raise

    def _process(self, frame: Frame, joints, sensors) -> SceneResult:
        t0 = time.perf_counter()

        self.thresh.check(frame)
        self.pose.update_sensors(joints, sensors)
        debug = self.thresh.init_debug_image()
        classified = self.thresh.threshold(frame)
        horizon = self.pose.horizon()

        overlay: Optional[np.ndarray] = debug if self.config.debug_overlay else None
        if self._executor is not None:
            # each detector draws on its own overlay; merged once both finish
            line_overlay = np.full_like(debug, DEBUG_CLEAR) if overlay is not None else None
            lm_future = self._executor.submit(self.landmarks.detect, classified, overlay)
            ln_future = self._executor.submit(self.lines.detect_lines, classified, horizon, line_overlay)
            found = lm_future.result()
            detection = ln_future.result()
            if line_overlay is not None:
                overlay_debug(debug, line_overlay)
        else:
            found = self.landmarks.detect(classified, overlay)
            detection = self.lines.detect_lines(classified, horizon, overlay)

        self._attach_estimates(found)
        ball = found.pop(LandmarkKind.BALL, None)
        elapsed_us = int((time.perf_counter() - t0) * 1e6)

        self.log.debug(
            "frame=%d ball=%s objects=%d lines=%d unused=%d corners=%d time_us=%d",
            frame.idx,
            ball is not None,
            len(found),
            len(detection.lines),
            len(detection.unused_points),
            len(detection.corners),
            elapsed_us,
        )

        return SceneResult(
            frame_idx=frame.idx,
            process_time_us=elapsed_us,
            classified=classified,
            debug=debug,
            ball=ball,
            field_objects=found,
            lines=detection.lines,
            unused_points=detection.unused_points,
            corners=detection.corners,
            horizon=horizon,
        )
