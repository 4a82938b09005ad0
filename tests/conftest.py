import numpy as np
import pytest

from field_vision.config import VisionConfig
from field_vision.fv_types import ColorClass, Frame
from field_vision.kinematics import HEAD_PITCH, NUM_JOINTS, NUM_SENSORS
from field_vision.pose import PoseModel
from field_vision.strategies.color_table import ColorTable

WIDTH, HEIGHT = 320, 240

# One representative raw (Y, U, V) triple per color the sample table knows.
SAMPLE_YUV = {
    ColorClass.UNDEFINED: (0, 0, 0),
    ColorClass.WHITE: (240, 128, 128),
    ColorClass.GREEN: (100, 90, 110),
    ColorClass.ORANGE: (140, 80, 200),
    ColorClass.BLUE: (60, 200, 100),
    ColorClass.YELLOW: (180, 40, 150),
}


@pytest.fixture
def config():
    """Full-size image with a coarse 32^3 table to keep buffers small."""
    return VisionConfig(
        image_width=WIDTH,
        image_height=HEIGHT,
        y_levels=32,
        u_levels=32,
        v_levels=32,
    )


@pytest.fixture
def table_buffer(config):
    table = np.zeros((config.y_levels, config.u_levels, config.v_levels), dtype=np.uint8)
    for color, (y, u, v) in SAMPLE_YUV.items():
        table[y >> 3, u >> 3, v >> 3] = int(color)
    return table.ravel().tobytes()


@pytest.fixture
def color_table(config, table_buffer):
    table = ColorTable(config.y_levels, config.u_levels, config.v_levels)
    table.reload(table_buffer)
    return table


def _encode(classes: np.ndarray, pixel_format: str) -> bytes:
    h, w = classes.shape
    yuv = np.zeros((h, w, 3), dtype=np.uint8)
    for color, triple in SAMPLE_YUV.items():
        yuv[classes == color] = triple
    if pixel_format == "yuv":
        return yuv.tobytes()
    packed = np.zeros((h, w // 2, 4), dtype=np.uint8)
    packed[:, :, 0] = yuv[:, 0::2, 0]
    packed[:, :, 1] = yuv[:, 0::2, 1]
    packed[:, :, 2] = yuv[:, 1::2, 0]
    packed[:, :, 3] = yuv[:, 0::2, 2]
    return packed.tobytes()


@pytest.fixture
def make_frame():
    """Build a raw frame whose pixels threshold to the given class map."""

    def _make(classes: np.ndarray, idx: int = 1, pixel_format: str = "yuyv") -> Frame:
        h, w = classes.shape
        return Frame(idx, _encode(classes, pixel_format), w, h, pixel_format)

    return _make


@pytest.fixture
def field_map():
    """Factory for a class map filled with one color (green by default)."""

    def _make(fill: ColorClass = ColorClass.GREEN) -> np.ndarray:
        return np.full((HEIGHT, WIDTH), int(fill), dtype=np.uint8)

    return _make


@pytest.fixture
def looking_down_joints():
    joints = [0.0] * NUM_JOINTS
    joints[HEAD_PITCH] = 0.6
    return joints


@pytest.fixture
def zero_sensors():
    return [0.0] * NUM_SENSORS


@pytest.fixture
def looking_down_pose(config, looking_down_joints, zero_sensors):
    """Pose with the head pitched far enough that the whole image sees ground."""
    pose = PoseModel(config)
    pose.update_sensors(looking_down_joints, zero_sensors)
    return pose


@pytest.fixture
def sample_yuv():
    return dict(SAMPLE_YUV)
