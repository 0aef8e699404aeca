from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from .document import Document
from .primitives import CURVE, FILLED_POLYGON, LINE_STRIP, POINT, TEXT_OUTLINE, Point3D, Primitive
from .scene import Scene, assemble
from .styles import color_to_hex
from .text import MatplotlibTextShaper, _require_matplotlib

# Line-type dots have zero length; draw them as short dashes.
_DOT_LENGTH = 0.5


class MatplotlibBackend:
    """Rendering backend drawing primitives onto a matplotlib Axes (XY plane)."""

    def __init__(self, ax: Any, *, line_width: float = 0.8, point_size: float = 2.0) -> None:
        self.ax = ax
        self.line_width = line_width
        self.point_size = point_size

    def add(self, primitive: Primitive) -> None:
        points = primitive.world_points()
        if not points:
            return
        color = color_to_hex(primitive.color)
        kind = primitive.kind
        if kind in {LINE_STRIP, CURVE}:
            _draw_polyline(
                self.ax,
                points,
                self.line_width,
                color=color,
                dashes=primitive.dash_pattern,
                closed=primitive.closed,
            )
        elif kind == FILLED_POLYGON:
            _draw_triangles(self.ax, points, primitive.triangles, color=color)
        elif kind == TEXT_OUTLINE:
            _draw_polyline(self.ax, points, self.line_width * 0.5, color=color, closed=True)
        elif kind == POINT:
            _draw_point(self.ax, points[0], self.point_size, color=color)


def plot(
    source: Document | Mapping[str, Any],
    *,
    ax: Any = None,
    show: bool = True,
    types: str | Iterable[str] | None = None,
    text: bool = True,
    title: str | None = None,
    auto_fit: bool = True,
    equal: bool = True,
    line_width: float = 0.8,
) -> Any:
    _require_matplotlib()
    import matplotlib.pyplot as plt

    if ax is None:
        _fig, ax = plt.subplots()
    backend = MatplotlibBackend(ax, line_width=line_width)
    shaper = MatplotlibTextShaper() if text else None
    scene = assemble(source, backend, types=types, text_shaper=shaper)
    _finish_axes(ax, scene, title=title, auto_fit=auto_fit, equal=equal)
    if show:
        plt.show()
    return ax


def _finish_axes(
    ax: Any,
    scene: Scene,
    *,
    title: str | None,
    auto_fit: bool,
    equal: bool,
) -> None:
    if title:
        ax.set_title(title)
    if equal:
        ax.set_aspect("equal", adjustable="box")
    if auto_fit:
        extents = scene.extents()
        if extents is not None:
            (min_x, min_y, _), (max_x, max_y, _) = extents
            margin = max(max_x - min_x, max_y - min_y) * 0.05 or 1.0
            ax.set_xlim(min_x - margin, max_x + margin)
            ax.set_ylim(min_y - margin, max_y + margin)


def _draw_polyline(
    ax: Any,
    points: Sequence[Point3D],
    line_width: float,
    color: str | None = None,
    dashes: Sequence[float] | None = None,
    closed: bool = False,
) -> None:
    xs = [p[0] for p in points]
    ys = [p[1] for p in points]
    if closed and len(points) > 2 and points[0] != points[-1]:
        xs.append(points[0][0])
        ys.append(points[0][1])
    kwargs: dict[str, Any] = {"linewidth": line_width, "color": color}
    dash_sequence = _matplotlib_dashes(dashes)
    if dash_sequence is not None:
        kwargs["dashes"] = dash_sequence
    ax.plot(xs, ys, **kwargs)


def _draw_triangles(
    ax: Any,
    points: Sequence[Point3D],
    triangles: Sequence[tuple[int, int, int]],
    color: str | None = None,
) -> None:
    for a, b, c in triangles:
        ax.fill(
            [points[a][0], points[b][0], points[c][0]],
            [points[a][1], points[b][1], points[c][1]],
            color=color,
            linewidth=0.0,
        )


def _draw_point(ax: Any, location: Point3D, size: float, color: str | None = None) -> None:
    ax.plot([location[0]], [location[1]], marker=".", markersize=size, color=color, linestyle="none")


def _matplotlib_dashes(pattern: Sequence[float] | None) -> list[float] | None:
    if not pattern:
        return None
    values = [value if value > 0.0 else _DOT_LENGTH for value in pattern]
    if len(values) % 2 == 1:
        values = values * 2
    return values
