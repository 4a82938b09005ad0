"""Color-segmentation vision core for a legged soccer robot."""

from .config import VisionConfig
from .facade import VisionPipeline
from .factory import PipelineFactory
from .link import VisionLink

__all__ = ["PipelineFactory", "VisionConfig", "VisionLink", "VisionPipeline"]
