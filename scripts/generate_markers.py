#!/usr/bin/env python3
"""Print-ready ArUco markers for the Augmented Museum.

Writes one aruco_marker_<id>.png per requested ID. With --policy multi each
marker ID shows painting number (id mod N), so generating consecutive IDs
gives one marker per painting.
"""

from __future__ import annotations

import argparse
import sys

from museum_pipeline.services.markers import create_marker


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate ArUco marker images"
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=".",
        help="Output directory (default: current directory)"
    )
    parser.add_argument(
        "--marker-ids",
        type=int,
        nargs="+",
        required=True,
        help="Marker IDs to generate (e.g., 0 1 2 3)"
    )
    parser.add_argument(
        "--dict",
        type=str,
        default="6x6_250",
        help="ArUco dictionary (default: 6x6_250)"
    )
    parser.add_argument(
        "--size",
        type=int,
        default=200,
        help="Marker size in pixels (default: 200)"
    )
    parser.add_argument(
        "--border-bits",
        type=int,
        default=1,
        help="Border size in bits (default: 1)"
    )

    args = parser.parse_args()

    print(f"Generating markers for ArUco dictionary: {args.dict}")
    for marker_id in args.marker_ids:
        try:
            path = create_marker(
                marker_id,
                args.dict,
                size_px=args.size,
                border_bits=args.border_bits,
                out_dir=args.output_dir,
            )
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Created marker: {path}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
