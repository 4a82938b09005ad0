from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from .fv_types import SceneResult
from .services.csv_writer import CsvWriter


class OutputSink(ABC):
    @abstractmethod
    def open(self, session_dir: Path) -> None: ...

    @abstractmethod
    def write_scene(self, scene: SceneResult, image_path: Optional[str]) -> None: ...

    @abstractmethod
    def close(self) -> None: ...


class CsvOutput(OutputSink):
    def __init__(self, filename: str = "landmarks.csv"):
        self.filename = filename
        self._writer: Optional[CsvWriter] = None

    def open(self, session_dir: Path) -> None:
        path = session_dir / self.filename
        self._writer = CsvWriter(str(path))
        self._writer.open()

    def write_scene(self, scene: SceneResult, image_path: Optional[str]) -> None:
        if self._writer is None:
            return
        for landmark in scene.landmarks:
            self._writer.append(scene.frame_idx, scene.process_time_us, landmark)

    def close(self) -> None:
        if self._writer is not None:
            self._writer.close()
            self._writer = None


class NullOutput(OutputSink):
    def open(self, session_dir: Path) -> None:
        return None

    def write_scene(self, scene: SceneResult, image_path: Optional[str]) -> None:
        return None

    def close(self) -> None:
        return None
