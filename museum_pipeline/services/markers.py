from pathlib import Path

import cv2

from ..strategies.detect_aruco import get_dict


def create_marker(
    marker_id: int,
    dict_name: str = "6x6_250",
    size_px: int = 200,
    border_bits: int = 1,
    out_dir: str | Path = ".",
) -> Path:
    """
    Render one ArUco marker and save it as aruco_marker_<id>.png.

    Args:
        marker_id: Marker ID within the dictionary
        dict_name: Dictionary name, e.g. "6x6_250"
        size_px: Side length of the output image in pixels
        border_bits: Width of the black border in marker bits
        out_dir: Output directory (created if needed)

    Returns:
        Path of the written image
    """
    img = cv2.aruco.generateImageMarker(
        get_dict(dict_name), marker_id, size_px, borderBits=border_bits
    )

    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)
    path = out / f"aruco_marker_{marker_id}.png"
    if not cv2.imwrite(str(path), img):
        raise OSError(f"Failed to write marker image: {path}")
    return path
