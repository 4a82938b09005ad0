import numpy as np

from ..errors import InvalidTableSize
from ..fv_types import ColorClass, NUM_COLORS


def _shift_for(levels: int) -> int:
    return 8 - (int(levels).bit_length() - 1)


class ColorTable:
    """
    Dense (Y, U, V) -> ColorClass lookup.

    The raw 8-bit channels are quantized by right-shifting down to the table's
    levels. The table is only ever replaced as a whole by `reload`.
    """

    def __init__(self, y_levels: int = 128, u_levels: int = 128, v_levels: int = 128):
        self.shape = (int(y_levels), int(u_levels), int(v_levels))
        self.shifts = tuple(_shift_for(n) for n in self.shape)
        self._table = np.zeros(self.shape, dtype=np.uint8)

    @property
    def size(self) -> int:
        return self.shape[0] * self.shape[1] * self.shape[2]

    @property
    def table(self) -> np.ndarray:
        return self._table

    def reload(self, buffer) -> None:
        if isinstance(buffer, np.ndarray):
            raw = buffer.astype(np.uint8, copy=False).ravel()
        else:
            raw = np.frombuffer(bytes(buffer), dtype=np.uint8)
        if raw.size != self.size:
            raise InvalidTableSize(
                f"color table must hold {self.size} entries, got {raw.size}"
            )
        table = raw.reshape(self.shape).copy()
        table[table >= NUM_COLORS] = ColorClass.UNDEFINED
        self._table = table

    def classify(self, y: int, u: int, v: int) -> ColorClass:
        ys, us, vs = self.shifts
        return ColorClass(int(self._table[int(y) >> ys, int(u) >> us, int(v) >> vs]))

    def classify_array(self, y: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
        ys, us, vs = self.shifts
        table = self._table
        return table[y >> ys, u >> us, v >> vs]
