from dataclasses import dataclass
from pathlib import Path

import numpy as np

from ..config import VisionConfig
from ..errors import InvalidFrameSize, InvalidSensorArity
from ..fv_types import Frame
from ..kinematics import NUM_JOINTS

FLOAT = np.dtype("<f4")


@dataclass
class LoggedFrame:
    """
    One frame log record.

    File layout: raw image bytes, then NUM_JOINTS little-endian float32 joint
    angles, then however many float32 sensor values the logger knew about.
    """

    frame: Frame
    joints: np.ndarray
    sensors: np.ndarray


def read_frame_file(path: str | Path, config: VisionConfig, idx: int = 0) -> LoggedFrame:
    p = Path(path)
    raw = p.read_bytes()
    image_size = config.image_byte_size
    if len(raw) < image_size:
        raise InvalidFrameSize(f"{p.name}: {len(raw)} bytes, image alone needs {image_size}")

    tail = raw[image_size:]
    if len(tail) % FLOAT.itemsize:
        raise InvalidSensorArity(f"{p.name}: trailing {len(tail)} bytes are not whole float32 values")
    values = np.frombuffer(tail, dtype=FLOAT).astype(np.float64)
    if values.size < NUM_JOINTS:
        raise InvalidSensorArity(f"{p.name}: {values.size} values, expected at least {NUM_JOINTS} joints")

    frame = Frame(idx, raw[:image_size], config.image_width, config.image_height, config.pixel_format)
    return LoggedFrame(frame, values[:NUM_JOINTS], values[NUM_JOINTS:])


def write_frame_file(path: str | Path, image: bytes, joints, sensors) -> None:
    with open(path, "wb") as fp:
        fp.write(bytes(image))
        fp.write(np.asarray(joints, dtype=FLOAT).tobytes())
        fp.write(np.asarray(sensors, dtype=FLOAT).tobytes())
