from __future__ import annotations

import argparse
from pathlib import Path

from .config import MODES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cutoutkit",
        description="Removes backgrounds behind people and crops detected persons from images",
    )
    parser.add_argument("--input", type=Path, required=False, help="Input directory")
    parser.add_argument("--output", type=Path, required=False, help="Output directory")
    parser.add_argument(
        "--mode",
        type=str,
        choices=list(MODES),
        help="Processing mode (overrides .env)",
    )
    parser.add_argument(
        "--live",
        type=str,
        metavar="SOURCE",
        help="Run per-frame background removal on a video file or camera index instead",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Process images already in the input directory and exit instead of watching",
    )
    return parser


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
