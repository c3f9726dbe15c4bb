from .driver import MarkerOverlayDriver, OverlayPolicy
from .strategies.capture_usb import SyntheticCapture, USBOpenCVCapture
from .strategies.detect_aruco import ArucoDetect
from .strategies.display import HeadlessDisplay, OpenCVWindow
from .strategies.localize_pnp import PnPLocalize
from .strategies.overlay import CornerOverlay, PoseProjectedOverlay

class StrategyFactory:
    @staticmethod
    def overlay_strategy(name: str, overlay_scale: float = 1.0):
        key = (name or "pose").strip().lower()
        if key == "pose":
            return PoseProjectedOverlay(overlay_scale=overlay_scale)
        if key == "corners":
            return CornerOverlay()
        raise ValueError(f"Unknown overlay strategy: {name!r} (expected 'pose' or 'corners')")

    @staticmethod
    def from_config(config, intrinsics, object_points, logger=None):
        # Camera (synthetic frames on dry runs)
        if getattr(config, "dry_run", False):
            cap = SyntheticCapture(config.fps, config.width, config.height)
            display = HeadlessDisplay()
        else:
            cap = USBOpenCVCapture(config.device, config.fps, config.width, config.height)
            display = OpenCVWindow(getattr(config, "window_name", "Main Window"))

        # Detection and localization
        det = ArucoDetect(config.aruco_dict)
        loc = PnPLocalize(intrinsics, object_points)

        # Overlay
        strategy = StrategyFactory.overlay_strategy(
            config.overlay_strategy, getattr(config, "overlay_scale", 1.0)
        )
        driver = MarkerOverlayDriver(strategy, OverlayPolicy(config.overlay_policy), logger)

        return cap, det, loc, driver, display
