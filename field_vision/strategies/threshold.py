import numpy as np

from ..config import PIXEL_FORMATS
from ..errors import InvalidFrameSize
from ..fv_types import ColorClass, Frame
from .color_table import ColorTable

DEBUG_CLEAR = int(ColorClass.UNDEFINED)


def overlay_debug(base: np.ndarray, debug: np.ndarray) -> np.ndarray:
    """Draw every non-clear debug pixel over base, in place."""
    marked = debug != DEBUG_CLEAR
    base[marked] = debug[marked]
    return base


class ThresholdEngine:
    """
    Turns a raw YUV frame into a classified map of the same pixel grid.

    Supported layouts:
        yuyv: packed 4:2:2, Y0 U Y1 V per pixel pair.
        yuv:  interleaved 4:4:4, Y U V per pixel.
    """

    def __init__(self, table: ColorTable, width: int, height: int, pixel_format: str = "yuyv"):
        if pixel_format not in PIXEL_FORMATS:
            raise ValueError(f"Unknown pixel_format: {pixel_format}")
        if pixel_format == "yuyv" and int(width) % 2:
            raise InvalidFrameSize(f"yuyv needs an even width, got {width}")
        self.table = table
        self.width = int(width)
        self.height = int(height)
        self.pixel_format = pixel_format
        self.thresholded = np.zeros((self.height, self.width), dtype=np.uint8)
        self.debug_image = np.full((self.height, self.width), DEBUG_CLEAR, dtype=np.uint8)

    @property
    def expected_size(self) -> int:
        return self.width * self.height * PIXEL_FORMATS[self.pixel_format]

    def init_debug_image(self) -> np.ndarray:
        """Start a blank overlay; a fresh array so earlier results keep theirs."""
        self.debug_image = np.full((self.height, self.width), DEBUG_CLEAR, dtype=np.uint8)
        return self.debug_image

    def _planes(self, raw: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        h, w = self.height, self.width
        if self.pixel_format == "yuyv":
            px = raw.reshape(h, w // 2, 4)
            y = px[:, :, (0, 2)].reshape(h, w)
            u = np.repeat(px[:, :, 1], 2, axis=1)
            v = np.repeat(px[:, :, 3], 2, axis=1)
        else:
            px = raw.reshape(h, w, 3)
            y, u, v = px[:, :, 0], px[:, :, 1], px[:, :, 2]
        return y, u, v

    def check(self, frame: Frame) -> None:
        """Raise InvalidFrameSize unless the frame matches this engine's grid and layout."""
        if (frame.width, frame.height) != (self.width, self.height):
            raise InvalidFrameSize(
                f"frame is {frame.width}x{frame.height}, expected {self.width}x{self.height}"
            )
        if frame.pixel_format != self.pixel_format:
            raise InvalidFrameSize(
                f"frame format {frame.pixel_format!r} does not match {self.pixel_format!r}"
            )
        if len(frame.data) != self.expected_size:
            raise InvalidFrameSize(
                f"frame has {len(frame.data)} bytes, expected {self.expected_size}"
            )

    def threshold(self, frame: Frame) -> np.ndarray:
        self.check(frame)
        raw = np.frombuffer(frame.data, dtype=np.uint8)
        y, u, v = self._planes(raw)
        self.thresholded = self.table.classify_array(y, u, v)
        return self.thresholded

    def composite(self) -> np.ndarray:
        """Classified map with any debug annotations drawn over it."""
        return overlay_debug(self.thresholded.copy(), self.debug_image)
