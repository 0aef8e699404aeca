from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterable, Sequence

Point3D = tuple[float, float, float]
Matrix4 = tuple[float, ...]

LINE_STRIP = "LINE_STRIP"
FILLED_POLYGON = "FILLED_POLYGON"
POINT = "POINT"
CURVE = "CURVE"
TEXT_OUTLINE = "TEXT_OUTLINE"

PRIMITIVE_KINDS = (LINE_STRIP, FILLED_POLYGON, POINT, CURVE, TEXT_OUTLINE)

_IDENTITY: Matrix4 = (
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
)


@dataclass(frozen=True)
class Transform:
    """Row-major 4x4 affine matrix acting on column vectors."""

    matrix: Matrix4 = _IDENTITY

    @classmethod
    def identity(cls) -> "Transform":
        return cls()

    @classmethod
    def translation(cls, x: float, y: float, z: float = 0.0) -> "Transform":
        return cls(
            (
                1.0, 0.0, 0.0, float(x),
                0.0, 1.0, 0.0, float(y),
                0.0, 0.0, 1.0, float(z),
                0.0, 0.0, 0.0, 1.0,
            )
        )

    @classmethod
    def rotation_z(cls, angle: float) -> "Transform":
        c = math.cos(angle)
        s = math.sin(angle)
        return cls(
            (
                c, -s, 0.0, 0.0,
                s, c, 0.0, 0.0,
                0.0, 0.0, 1.0, 0.0,
                0.0, 0.0, 0.0, 1.0,
            )
        )

    @classmethod
    def scaling(cls, sx: float, sy: float, sz: float = 1.0) -> "Transform":
        return cls(
            (
                float(sx), 0.0, 0.0, 0.0,
                0.0, float(sy), 0.0, 0.0,
                0.0, 0.0, float(sz), 0.0,
                0.0, 0.0, 0.0, 1.0,
            )
        )

    @classmethod
    def from_insert(
        cls,
        insert: Sequence[float],
        *,
        rotation: float = 0.0,
        scale: Sequence[float] = (1.0, 1.0, 1.0),
        base_point: Sequence[float] = (0.0, 0.0, 0.0),
    ) -> "Transform":
        """Block placement: ``T(insert) * Rz(rotation) * S(scale) * T(-base_point)``.

        ``rotation`` is in radians.
        """
        return (
            cls.translation(*insert)
            .compose(cls.rotation_z(rotation))
            .compose(cls.scaling(*scale))
            .compose(cls.translation(-base_point[0], -base_point[1], -base_point[2]))
        )

    @property
    def is_identity(self) -> bool:
        return self.matrix == _IDENTITY

    def compose(self, other: "Transform") -> "Transform":
        """Return ``self * other``: ``other`` is applied first."""
        a = self.matrix
        b = other.matrix
        return Transform(
            tuple(
                sum(a[row * 4 + k] * b[k * 4 + col] for k in range(4))
                for row in range(4)
                for col in range(4)
            )
        )

    def apply(self, point: Sequence[float]) -> Point3D:
        m = self.matrix
        x = float(point[0])
        y = float(point[1])
        z = float(point[2]) if len(point) > 2 else 0.0
        return (
            m[0] * x + m[1] * y + m[2] * z + m[3],
            m[4] * x + m[5] * y + m[6] * z + m[7],
            m[8] * x + m[9] * y + m[10] * z + m[11],
        )


@dataclass(frozen=True)
class Primitive:
    """One renderable piece of geometry.

    ``points`` are in the coordinates of the entity that produced the
    primitive; ``transform`` maps them into drawing coordinates.
    ``triangles`` indexes ``points`` for filled kinds.
    """

    kind: str
    points: tuple[Point3D, ...]
    color: int = 0x000000
    dash_pattern: tuple[float, ...] | None = None
    transform: Transform = field(default_factory=Transform)
    triangles: tuple[tuple[int, int, int], ...] = ()
    closed: bool = False
    dxftype: str = ""
    layer: str | None = None
    handle: int | str | None = None

    def world_points(self) -> list[Point3D]:
        if self.transform.is_identity:
            return list(self.points)
        return [self.transform.apply(point) for point in self.points]

    def transformed(self, transform: Transform) -> "Primitive":
        return replace(self, transform=transform.compose(self.transform))

    def styled(self, color: int, dash_pattern: tuple[float, ...] | None) -> "Primitive":
        return replace(self, color=color, dash_pattern=dash_pattern)


def bounding_box(primitives: Iterable[Primitive]) -> tuple[Point3D, Point3D] | None:
    xs: list[float] = []
    ys: list[float] = []
    zs: list[float] = []
    for primitive in primitives:
        for x, y, z in primitive.world_points():
            xs.append(x)
            ys.append(y)
            zs.append(z)
    if not xs:
        return None
    return (min(xs), min(ys), min(zs)), (max(xs), max(ys), max(zs))
