import argparse
import signal
import sys

from museum_pipeline.errors import ConfigError, FatalError

from .app import MuseumApp
from .config import MuseumConfig, load_config
from .logging_utils import setup_logger


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Augmented Museum: hang virtual paintings on ArUco markers",
        epilog="Keys: q quit, s screenshot, a/d previous/next painting",
    )
    ap.add_argument("--config", help="Path to JSON/YAML config")

    ap.add_argument("-p", "--path", help="Directory of paintings (default bin/paintings)")
    ap.add_argument("-c", "--calibration", help="Camera calibration file (default bin/calibration.xml)")
    ap.add_argument("-a", "--aruco", action="store_true", help="Create a random ArUco marker image at startup")
    ap.add_argument("--camera-name")
    ap.add_argument("--device")
    ap.add_argument("--fps", type=int)
    ap.add_argument("--width", type=int)
    ap.add_argument("--height", type=int)
    ap.add_argument("--dict")
    ap.add_argument("--marker-length", type=float)
    ap.add_argument("--policy", choices=["single", "multi"], help="Painting per marker selection")
    ap.add_argument("--strategy", choices=["pose", "corners"], help="Overlay placement")
    ap.add_argument("--overlay-scale", type=float)
    ap.add_argument("--screenshot-dir")
    ap.add_argument("--max-frames", type=int)
    ap.add_argument("--log-path")
    ap.add_argument("--dry-run", action="store_true", help="Synthetic frames, no window")

    return ap


def _apply_args(cfg: MuseumConfig, args: argparse.Namespace) -> MuseumConfig:
    device = args.device
    if isinstance(device, str) and device.isdigit():
        device = int(device)

    cfg.apply_overrides(
        camera_name=args.camera_name,
        device=device,
        fps=args.fps,
        width=args.width,
        height=args.height,
        calibration_path=args.calibration,
        images_path=args.path,
        screenshot_dir=args.screenshot_dir,
        aruco_dict=args.dict,
        marker_length=args.marker_length,
        overlay_policy=args.policy,
        overlay_strategy=args.strategy,
        overlay_scale=args.overlay_scale,
        max_frames=args.max_frames,
        log_path=args.log_path,
        create_marker=True if args.aruco else None,
        dry_run=True if args.dry_run else None,
    )
    return cfg


def main(argv=None) -> int:
    ap = _build_parser()
    args = ap.parse_args(argv)

    try:
        cfg = load_config(args.config) if args.config else MuseumConfig()
    except ConfigError as e:
        setup_logger(MuseumConfig().camera_name).error("%s", e)
        return 1
    cfg = _apply_args(cfg, args)
    if cfg.marker_length <= 0:
        ap.error("--marker-length must be positive")

    logger = setup_logger(cfg.camera_name)
    app = MuseumApp(cfg, logger=logger)

    def _handle_signal(_sig, _frame):
        app.stop()

    signal.signal(signal.SIGINT, _handle_signal)
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _handle_signal)

    try:
        summary = app.run()
    except FatalError as e:
        logger.error("%s", e)
        return 1

    print(summary)
    return 0


if __name__ == "__main__":
    sys.exit(main())
