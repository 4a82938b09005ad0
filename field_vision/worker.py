from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import VisionConfig
from .errors import VisionError
from .facade import VisionPipeline
from .factory import PipelineFactory
from .logging_utils import add_file_handler, remove_handler, setup_logger
from .output import CsvOutput, OutputSink
from .render import annotate
from .services.frame_io import read_frame_file
from .services.storage import SessionStorage

FRAME_SUFFIXES = (".frm", ".raw")


@dataclass
class SessionSummary:
    session_path: str
    frames_processed: int
    csv_path: str
    log_path: str
    avg_fps: float
    errors: int


class ReplayWorker:
    """Replays logged frames from disk through a vision pipeline."""

    def __init__(
        self,
        config: VisionConfig,
        logger=None,
        outputs: Optional[list[OutputSink]] = None,
        pipeline: Optional[VisionPipeline] = None,
    ):
        self.config = config
        self.logger = logger or setup_logger(config.robot_name, config.log_level)
        self.outputs = outputs if outputs is not None else [CsvOutput()]
        self.pipeline = pipeline
        self._stop_event = threading.Event()

    def stop(self) -> None:
        self._stop_event.set()

    def frame_paths(self) -> list[Path]:
        root = Path(self.config.frames_dir)
        if not root.is_dir():
            raise FileNotFoundError(f"Frames directory not found: {root}")
        return sorted(p for p in root.iterdir() if p.suffix.lower() in FRAME_SUFFIXES)

    def run(self) -> SessionSummary:
        paths = self.frame_paths()

        storage = SessionStorage(self.config.session_root, name=f"{self.config.robot_name}_session")
        session_path = storage.begin()
        storage.write_manifest(self.config.as_dict())

        log_file = str(Path(storage.logs_dir) / "session.log")
        file_handler = add_file_handler(self.logger, self.config.robot_name, log_file)

        pipeline = self.pipeline
        t0 = time.time()
        frames = 0
        errors = 0

        try:
            if pipeline is None:
                pipeline = PipelineFactory.from_config(self.config, logger=self.logger)

            for out in self.outputs:
                out.open(Path(storage.session_dir))

            self.logger.info("session started: %s", session_path)
            self.logger.info("config: %s", self.config.as_dict())

            for idx, path in enumerate(paths, 1):
                if self._stop_event.is_set():
                    break
                if self.config.max_frames and frames >= self.config.max_frames:
                    break

                try:
                    logged = read_frame_file(path, self.config, idx=idx)
                    scene = pipeline.process_frame(logged.frame, logged.joints, logged.sensors)
                except VisionError as e:
                    errors += 1
                    self.logger.warning("skipping %s: %s", path.name, e)
                    continue

                image_path = None
                if self.config.save_annotated:
                    image_path = storage.save_annotated(idx, annotate(scene))

                for out in self.outputs:
                    out.write_scene(scene, image_path)

                self.logger.info(
                    "frame=%d file=%s ball=%s objects=%d lines=%d corners=%d time_us=%d",
                    idx,
                    path.name,
                    scene.ball is not None,
                    len(scene.field_objects),
                    len(scene.lines),
                    len(scene.corners),
                    scene.process_time_us,
                )
                frames += 1

            avg = frames / max(1e-6, (time.time() - t0))
            self.logger.info("summary frames=%d avg_fps=%.2f errors=%d", frames, avg, errors)

        finally:
            if self.pipeline is None and pipeline is not None:
                pipeline.close()
            for out in self.outputs:
                try:
                    out.close()
                except Exception as e:
                    self.logger.warning("output close failed: %s", e)
            remove_handler(self.logger, file_handler)

        csv_path = str(Path(storage.session_dir) / "landmarks.csv")
        return SessionSummary(
            str(session_path),
            frames,
            csv_path,
            log_file,
            avg,
            errors,
        )
