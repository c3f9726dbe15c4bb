from dataclasses import dataclass
from typing import Any, Optional

@dataclass
class Frame:
    idx: int
    ts_iso: str
    image: Any  # numpy array

@dataclass
class Detection:
    marker_id: int
    corners: Any  # (4,2) ndarray, TL, TR, BR, BL
    rvec: Any | None
    tvec: Any | None

    @property
    def has_pose(self) -> bool:
        return self.rvec is not None and self.tvec is not None

@dataclass
class Pose:
    rvec: Any
    tvec: Any

@dataclass(frozen=True)
class CameraIntrinsics:
    camera_matrix: Any  # 3x3 ndarray
    dist_coeffs: Any  # (N,1) ndarray
    rotation_vectors: tuple = ()
    translation_vectors: tuple = ()

@dataclass
class OverlayImage:
    name: str
    image: Any  # BGR ndarray

    @property
    def width(self) -> int:
        return int(self.image.shape[1]) if self.image.ndim >= 2 else 0

    @property
    def height(self) -> int:
        return int(self.image.shape[0]) if self.image.ndim >= 2 else 0

@dataclass(frozen=True)
class OverlayOutcome:
    marker_id: int
    applied: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls, marker_id: int) -> "OverlayOutcome":
        return cls(marker_id, True)

    @classmethod
    def skipped(cls, marker_id: int, reason: str) -> "OverlayOutcome":
        return cls(marker_id, False, reason)
