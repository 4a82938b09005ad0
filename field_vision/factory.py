import logging
from typing import Optional

from .config import VisionConfig
from .facade import VisionPipeline
from .pose import PoseModel
from .services.calib import load_calibration
from .services.table_io import load_color_table
from .strategies.color_table import ColorTable
from .strategies.field_lines import LineDetector
from .strategies.landmarks import LandmarkDetector
from .strategies.threshold import ThresholdEngine


class PipelineFactory:
    @staticmethod
    def from_config(config: VisionConfig, logger: Optional[logging.Logger] = None) -> VisionPipeline:
        table = ColorTable(config.y_levels, config.u_levels, config.v_levels)
        if config.table_path:
            table.reload(load_color_table(config.table_path, expected_size=table.size))

        calibration = load_calibration(config.calibration_path) if config.calibration_path else None
        pose = PoseModel(config, calibration, logger=logger)

        thresh = ThresholdEngine(table, config.image_width, config.image_height, config.pixel_format)
        landmarks = LandmarkDetector(config.landmarks)
        lines = LineDetector(pose.pixel_to_estimate, config.lines)

        return VisionPipeline(config, table, pose, thresh, landmarks, lines, logger=logger)
