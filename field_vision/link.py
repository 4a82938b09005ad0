"""
Transport-facing boundary of the vision core.

Callers hand over flat buffers (raw image, joints, sensors, color table) and
pre-sized output buffers. Every size is checked before any state changes, so
a malformed call leaves the pipeline exactly as it was.
"""

from typing import Sequence

import numpy as np

from .errors import InvalidFrameSize, InvalidOutputBufferSize, InvalidSensorArity, InvalidTableSize
from .facade import VisionPipeline
from .fv_types import CalibrationParams, Frame, SceneResult
from .kinematics import NUM_JOINTS, NUM_SENSORS
from .strategies.threshold import overlay_debug

ESTIMATE_SIZE = 5
CALIBRATION_SIZE = len(CalibrationParams.FIELDS)


class VisionLink:
    def __init__(self, pipeline: VisionPipeline, offline_overlay: bool = True):
        self.pipeline = pipeline
        self.offline_overlay = offline_overlay
        self._frame_idx = 0

    def process_image(
        self,
        image,
        joints: Sequence[float],
        sensors: Sequence[float],
        table,
        thresh_target: np.ndarray,
        table_changed: bool = True,
    ) -> SceneResult:
        cfg = self.pipeline.config
        if len(image) != cfg.image_byte_size:
            raise InvalidFrameSize(
                f"image has {len(image)} bytes, expected {cfg.image_byte_size}"
            )
        if len(joints) != NUM_JOINTS:
            raise InvalidSensorArity(f"expected {NUM_JOINTS} joint angles, got {len(joints)}")
        if len(sensors) > NUM_SENSORS:
            raise InvalidSensorArity(f"expected at most {NUM_SENSORS} sensors, got {len(sensors)}")
        if table is not None and len(table) != cfg.table_size:
            raise InvalidTableSize(f"color table must hold {cfg.table_size} entries, got {len(table)}")
        if thresh_target.shape != (cfg.image_height, cfg.image_width):
            raise InvalidOutputBufferSize(
                f"thresh_target is {thresh_target.shape}, expected "
                f"{(cfg.image_height, cfg.image_width)}"
            )

        if table is not None and table_changed:
            self.pipeline.reload_table(table)

        self._frame_idx += 1
        frame = Frame(self._frame_idx, bytes(image), cfg.image_width, cfg.image_height, cfg.pixel_format)
        scene = self.pipeline.process_frame(frame, joints, sensors)

        np.copyto(thresh_target, scene.classified, casting="unsafe")
        if self.offline_overlay:
            overlay_debug(thresh_target, scene.debug)
        return scene

    def pix_estimate(self, px: float, py: float, object_height: float, result: np.ndarray) -> np.ndarray:
        """Fill `result` with distance, elevation, bearing, x, y."""
        if np.size(result) != ESTIMATE_SIZE:
            raise InvalidOutputBufferSize(
                f"estimate buffer must hold {ESTIMATE_SIZE} values, got {np.size(result)}"
            )
        est = self.pipeline.pixel_to_estimate(px, py, object_height)
        result[:] = est.as_list()
        return result

    def get_camera_calibrate(self, buffer: np.ndarray) -> np.ndarray:
        if np.size(buffer) != CALIBRATION_SIZE:
            raise InvalidOutputBufferSize(
                f"calibration buffer must hold {CALIBRATION_SIZE} values, got {np.size(buffer)}"
            )
        buffer[:] = self.pipeline.calibration().as_list()
        return buffer

    def set_camera_calibrate(self, buffer: Sequence[float]) -> CalibrationParams:
        if np.size(buffer) != CALIBRATION_SIZE:
            raise InvalidOutputBufferSize(
                f"calibration buffer must hold {CALIBRATION_SIZE} values, got {np.size(buffer)}"
            )
        return self.pipeline.set_calibration(np.asarray(buffer, dtype=np.float64).tolist())
