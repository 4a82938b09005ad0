import argparse
import signal
import sys

from .config import VisionConfig, load_config
from .worker import ReplayWorker


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Replay logged frames through the vision pipeline")
    ap.add_argument("--config", help="Path to JSON/YAML config")

    ap.add_argument("--robot-name")
    ap.add_argument("--frames-dir")
    ap.add_argument("--table")
    ap.add_argument("--calib")
    ap.add_argument("--out")
    ap.add_argument("--max-frames", type=int)
    ap.add_argument("--log-level")
    ap.add_argument("--parallel", action="store_true")
    ap.add_argument("--debug-overlay", action="store_true")
    ap.add_argument("--save-annotated", action="store_true")
    ap.add_argument("--no-save-annotated", action="store_true")

    return ap


def _apply_args(cfg: VisionConfig, args: argparse.Namespace) -> VisionConfig:
    save_annotated = None
    if args.save_annotated:
        save_annotated = True
    if args.no_save_annotated:
        save_annotated = False

    cfg.apply_overrides(
        robot_name=args.robot_name,
        frames_dir=args.frames_dir,
        table_path=args.table,
        calibration_path=args.calib,
        session_root=args.out,
        max_frames=args.max_frames,
        log_level=args.log_level.upper() if args.log_level else None,
        parallel_detection=True if args.parallel else None,
        debug_overlay=True if args.debug_overlay else None,
        save_annotated=save_annotated,
    )
    return cfg


def main(argv=None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    cfg = load_config(args.config) if args.config else VisionConfig()
    cfg = _apply_args(cfg, args)

    worker = ReplayWorker(cfg)

    def _handle_signal(_sig, _frame):
        worker.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle_signal)

    summary = worker.run()
    print(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
