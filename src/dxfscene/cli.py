from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Sequence

from .document import read
from .rounding import round10
from .scene import assemble

_EXTENT_EXPONENT = -3


def setup_logging(level: int | str = "WARNING") -> None:
    """Apply a minimal logging configuration once.

    Does nothing when the root logger already has handlers.
    """
    if isinstance(level, str):
        lvl = getattr(logging, level.upper(), logging.WARNING)
    else:
        lvl = int(level)

    root = logging.getLogger()
    if root.handlers:
        return
    logging.basicConfig(
        level=lvl,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _package_version() -> str:
    try:
        return version("dxfscene")
    except PackageNotFoundError:
        return "0.0.0"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dxfscene",
        description="Convert DXF drawings into renderable primitives.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()}",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log skipped entities and conversion details.",
    )
    subparsers = parser.add_subparsers(dest="command")

    inspect_parser = subparsers.add_parser(
        "inspect",
        help="Show entity and primitive counts of a DXF file.",
    )
    inspect_parser.add_argument("path", help="Path to DXF file.")
    inspect_parser.add_argument(
        "--types",
        default=None,
        help='Entity filter, e.g. "LINE ARC LWPOLYLINE".',
    )
    inspect_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail if any entity produces no primitives.",
    )

    plot_parser = subparsers.add_parser(
        "plot",
        help="Render a DXF file to an image using matplotlib.",
    )
    plot_parser.add_argument("path", help="Path to DXF file.")
    plot_parser.add_argument("output_path", help="Path to output image (png, svg, pdf).")
    plot_parser.add_argument(
        "--types",
        default=None,
        help='Entity filter, e.g. "LINE ARC LWPOLYLINE".',
    )
    plot_parser.add_argument("--dpi", type=int, default=150, help="Output resolution.")
    plot_parser.add_argument(
        "--no-text",
        action="store_true",
        help="Skip TEXT and MTEXT shaping.",
    )
    return parser


def _run_inspect(path: str, *, types: str | None = None, strict: bool = False) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    try:
        doc = read(str(file_path))
    except Exception as exc:
        print(f"error: failed to read DXF: {exc}", file=sys.stderr)
        return 2

    try:
        scene = assemble(doc, types=types, strict=strict)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    entity_counts = Counter(entity.dxftype for entity in doc.query(types))
    print(f"file: {file_path}")
    print(f"layers: {len(doc.layers)}")
    print(f"line_types: {len(doc.line_types)}")
    print(f"blocks: {len(doc.blocks)}")
    print(f"total_entities: {scene.total_entities}")
    for dxftype, count in sorted(entity_counts.items()):
        print(f"{dxftype}: {count}")
    print(f"converted_entities: {scene.converted_entities}")
    print(f"skipped_entities: {scene.skipped_entities}")
    for dxftype, count in scene.skipped_by_type.items():
        print(f"skipped[{dxftype}]: {count}")
    print(f"primitives: {len(scene.primitives)}")
    for kind, count in scene.counts_by_kind().items():
        print(f"primitives[{kind}]: {count}")

    extents = scene.extents()
    if extents is not None:
        low, high = extents
        print(f"extents_min: {_format_point(low)}")
        print(f"extents_max: {_format_point(high)}")
    return 0


def _run_plot(
    path: str,
    output_path: str,
    *,
    types: str | None = None,
    dpi: int = 150,
    text: bool = True,
) -> int:
    file_path = Path(path)
    if not file_path.exists():
        print(f"error: file not found: {file_path}", file=sys.stderr)
        return 2

    try:
        doc = read(str(file_path))
        ax = doc.plot(show=False, types=types, text=text, title=file_path.name)
        out_path = Path(output_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        ax.figure.savefig(str(out_path), dpi=dpi)
    except Exception as exc:
        print(f"error: failed to plot DXF: {exc}", file=sys.stderr)
        return 2

    print(f"output: {out_path}")
    return 0


def _format_point(point: Sequence[float]) -> str:
    return "(" + ", ".join(f"{round10(value, _EXTENT_EXPONENT):g}" for value in point) + ")"


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else "WARNING")

    if args.command == "inspect":
        return _run_inspect(args.path, types=args.types, strict=bool(args.strict))
    if args.command == "plot":
        return _run_plot(
            args.path,
            args.output_path,
            types=args.types,
            dpi=int(args.dpi),
            text=not bool(args.no_text),
        )

    parser.print_help()
    return 0
