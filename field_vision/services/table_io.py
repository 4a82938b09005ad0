from pathlib import Path
from typing import Optional

import numpy as np

from ..errors import InvalidTableSize


def load_color_table(path: str, expected_size: Optional[int] = None) -> np.ndarray:
    """Read a flat color table file (one class byte per quantized YUV entry)."""
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Color table not found: {p}")
    data = np.fromfile(p, dtype=np.uint8)
    if expected_size is not None and data.size != expected_size:
        raise InvalidTableSize(f"{p.name} holds {data.size} entries, expected {expected_size}")
    return data


def save_color_table(path: str, table: np.ndarray) -> None:
    np.asarray(table, dtype=np.uint8).ravel().tofile(path)
