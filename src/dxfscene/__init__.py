from typing import Sequence

from .bspline import (
    BSplineError,
    InvalidDegree,
    InvalidKnotVector,
    InvalidWeights,
    ParameterOutOfBounds,
    evaluate,
)
from .convert import ConversionContext, convert
from .document import Block, Document, Layer, LineType, read
from .entity import Entity
from .primitives import Primitive, Transform
from .render import plot
from .rounding import round10, round_decimal
from .scene import Scene, assemble, iter_primitives
from .styles import build_dash_pattern, resolve_color

__all__ = [
    "read",
    "Document",
    "Layer",
    "LineType",
    "Block",
    "Entity",
    "ConversionContext",
    "convert",
    "assemble",
    "iter_primitives",
    "Scene",
    "Primitive",
    "Transform",
    "evaluate",
    "BSplineError",
    "ParameterOutOfBounds",
    "InvalidDegree",
    "InvalidKnotVector",
    "InvalidWeights",
    "resolve_color",
    "build_dash_pattern",
    "round10",
    "round_decimal",
    "plot",
]


def main(argv: Sequence[str] | None = None) -> int:
    from dxfscene.cli import main as cli_main

    return cli_main(argv)
