import cv2

from ..mp_types import Detection, Frame

DEFAULT_DICT = "6x6_250"

_DICTS = {
    f"{bits}x{bits}_{count}": getattr(cv2.aruco, f"DICT_{bits}X{bits}_{count}")
    for bits in (4, 5, 6, 7)
    for count in (50, 100, 250, 1000)
}


def get_dict(name: str) -> cv2.aruco.Dictionary:
    """
    Resolve a predefined ArUco dictionary by name.

    Accepts "6x6_250" or "DICT_6X6_250"; unknown names fall back to 6x6_250,
    the dictionary printed markers are generated from.
    """
    key = (name or "").strip().lower()
    if key.startswith("dict_"):
        key = key[5:]
    return cv2.aruco.getPredefinedDictionary(_DICTS.get(key, _DICTS[DEFAULT_DICT]))


class ArucoDetect:
    """Find markers in a frame. Poses are left empty for the localizer."""

    def __init__(self, dict_name: str = DEFAULT_DICT):
        self.dictionary = get_dict(dict_name)
        self._detector = cv2.aruco.ArucoDetector(self.dictionary, cv2.aruco.DetectorParameters())

    def detect(self, f: Frame) -> list[Detection]:
        corners, ids, _rejected = self._detector.detectMarkers(f.image)
        if ids is None:
            return []
        return [
            Detection(int(mid), c.reshape(4, 2), None, None)
            for mid, c in zip(ids.flatten(), corners)
        ]
