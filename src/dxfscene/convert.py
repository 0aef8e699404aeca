from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Sequence

from .bspline import BSplineError, sample
from .document import DEFAULT_LAYER, Block, Document, Layer, LineType
from .entity import Entity, Point3D
from .mtext import Directive, height_from_directives, parse_mtext_content
from .primitives import (
    CURVE,
    FILLED_POLYGON,
    LINE_STRIP,
    POINT,
    TEXT_OUTLINE,
    Primitive,
    Transform,
)
from .styles import DEFAULT_COLOR, build_dash_pattern, resolve_color
from .text import Outline, TextShaper, text_width

logger = logging.getLogger(__name__)

ContentParser = Callable[[str], tuple[str, list[Directive]]]

_ORIGIN: Point3D = (0.0, 0.0, 0.0)
_TWO_PI = 2.0 * math.pi
_EPS = 1.0e-12
# One bulge arc segment per 10 degrees of included angle.
_BULGE_STEP = math.pi / 18.0
_MIN_BULGE_SEGMENTS = 6
_MTEXT_LINE_SPACING = 5.0 / 3.0
# attachment point -> (horizontal anchor factor, vertical anchor)
_MTEXT_ATTACHMENT = {
    1: (0.0, "top"),
    2: (0.5, "top"),
    3: (1.0, "top"),
    4: (0.0, "middle"),
    5: (0.5, "middle"),
    6: (1.0, "middle"),
    7: (0.0, "bottom"),
    8: (0.5, "bottom"),
    9: (1.0, "bottom"),
}


@dataclass(frozen=True)
class ConversionContext:
    layers: Mapping[str, Layer] = field(default_factory=dict)
    line_types: Mapping[str, LineType] = field(default_factory=dict)
    blocks: Mapping[str, Block] = field(default_factory=dict)
    text_shaper: TextShaper | None = None
    content_parser: ContentParser = parse_mtext_content
    default_color: int = DEFAULT_COLOR
    default_layer: str = DEFAULT_LAYER
    circle_segments: int = 32
    arc_segments: int = 32
    ellipse_segments: int = 50
    spline_segments: int = 25
    max_block_depth: int = 16

    @classmethod
    def from_document(cls, document: Document, **kwargs: Any) -> "ConversionContext":
        return cls(
            layers=document.layers,
            line_types=document.line_types,
            blocks=document.blocks,
            **kwargs,
        )


def convert(entity: Entity, context: ConversionContext) -> list[Primitive]:
    """Convert one entity into primitives.

    Malformed entities, unresolvable block references and unknown entity
    types produce an empty list instead of raising.
    """
    return _convert(entity, context, ())


def _convert(
    entity: Entity,
    context: ConversionContext,
    block_stack: tuple[str, ...],
) -> list[Primitive]:
    try:
        primitives = _convert_unsafe(entity, context, block_stack)
    except BSplineError as exc:
        logger.debug("skipping %s %s: %s", entity.dxftype, entity.handle, exc)
        return []
    except Exception:
        logger.debug("failed to convert %s %s", entity.dxftype, entity.handle, exc_info=True)
        return []

    if not primitives or entity.dxftype == "INSERT":
        # Block content keeps the styling of its own entities.
        return primitives

    color = resolve_color(
        entity,
        context.layers,
        default_color=context.default_color,
        default_layer=context.default_layer,
    )
    dash_pattern = build_dash_pattern(entity, context.line_types)
    return [primitive.styled(color, dash_pattern) for primitive in primitives]


def _convert_unsafe(
    entity: Entity,
    context: ConversionContext,
    block_stack: tuple[str, ...],
) -> list[Primitive]:
    dxftype = entity.dxftype
    dxf = entity.dxf

    if dxftype == "LINE":
        start = dxf.get("start")
        end = dxf.get("end")
        if start is None or end is None:
            return []
        return [_primitive(entity, LINE_STRIP, [start, end])]

    if dxftype in {"LWPOLYLINE", "POLYLINE"}:
        raw_points = list(dxf.get("points") or [])
        raw_bulges = list(dxf.get("bulges") or [])
        raw_bulges.extend([0.0] * (len(raw_points) - len(raw_bulges)))
        pairs = [(point, float(bulge or 0.0)) for point, bulge in zip(raw_points, raw_bulges) if point is not None]
        if len(pairs) < 2:
            return []
        closed = bool(dxf.get("closed", False))
        path = build_bulge_path(
            [point for point, _ in pairs],
            [bulge for _, bulge in pairs],
            closed=closed,
        )
        return [_primitive(entity, LINE_STRIP, path, closed=closed)]

    if dxftype == "CIRCLE":
        center = dxf.get("center")
        radius = float(dxf.get("radius", 0.0))
        if center is None or radius <= 0.0:
            return []
        points = _ellipse_points(center, radius, radius, 0.0, 0.0, _TWO_PI, context.circle_segments)
        points[-1] = points[0]
        return [_primitive(entity, LINE_STRIP, points, closed=True)]

    if dxftype == "ARC":
        center = dxf.get("center")
        radius = float(dxf.get("radius", 0.0))
        sweep = _sweep(dxf.get("start_angle", 0.0), dxf.get("end_angle", _TWO_PI))
        if center is None or radius <= 0.0 or sweep is None:
            return []
        start = float(dxf.get("start_angle", 0.0))
        points = _ellipse_points(center, radius, radius, 0.0, start, sweep, context.arc_segments)
        return [_primitive(entity, LINE_STRIP, points)]

    if dxftype == "ELLIPSE":
        return _convert_ellipse(entity, context)

    if dxftype == "SPLINE":
        return _convert_spline(entity, context)

    if dxftype == "POINT":
        location = dxf.get("location")
        if location is None:
            return []
        return [_primitive(entity, POINT, [location])]

    if dxftype == "SOLID":
        points = [point for point in (dxf.get("points") or []) if point is not None]
        if len(points) >= 4 and points[3] == points[2]:
            points = points[:3]
        if len(points) < 3:
            return []
        if len(points) == 3:
            triangles = ((0, 1, 2),)
        else:
            # DXF SOLID corners run 1-2-4-3, so the quad splits along 2-3.
            points = points[:4]
            triangles = ((0, 1, 2), (1, 3, 2))
        return [_primitive(entity, FILLED_POLYGON, points, triangles=triangles, closed=True)]

    if dxftype == "TEXT":
        return _convert_text(entity, context)

    if dxftype == "MTEXT":
        return _convert_mtext(entity, context)

    if dxftype == "INSERT":
        return _convert_insert(entity, context, block_stack)

    logger.debug("unsupported entity type %s %s", dxftype, entity.handle)
    return []


def build_bulge_path(
    points: Sequence[Point3D],
    bulges: Sequence[float],
    *,
    closed: bool = False,
) -> list[Point3D]:
    """Polyline vertices with every bulged segment expanded into arc points.

    The segment from vertex ``i`` to ``i + 1`` is an arc when ``bulges[i]``
    is non-zero; the closing segment uses the last vertex's bulge.
    """
    count = len(points)
    if count == 0:
        return []
    path = [tuple(points[0])]
    segment_count = count if closed else count - 1
    for i in range(segment_count):
        start = points[i]
        end = points[(i + 1) % count]
        bulge = bulges[i] if i < len(bulges) else 0.0
        if bulge:
            path.extend(_bulge_arc_points(start, end, bulge))
        path.append(tuple(end))
    return path


def _bulge_arc_points(start: Point3D, end: Point3D, bulge: float) -> list[Point3D]:
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    chord = math.hypot(dx, dy)
    if chord <= _EPS:
        return []

    theta = 4.0 * math.atan(bulge)
    radius = abs(chord / (2.0 * math.sin(theta / 2.0)))
    # Signed distance from the chord midpoint to the center, left of start->end.
    offset = (chord / 2.0) / math.tan(theta / 2.0)
    cx = (start[0] + end[0]) / 2.0 - dy / chord * offset
    cy = (start[1] + end[1]) / 2.0 + dx / chord * offset

    start_angle = math.atan2(start[1] - cy, start[0] - cx)
    segments = max(_MIN_BULGE_SEGMENTS, int(math.ceil(abs(theta) / _BULGE_STEP)))
    z = start[2] if len(start) > 2 else 0.0
    points: list[Point3D] = []
    for k in range(1, segments):
        angle = start_angle + theta * k / segments
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle), z))
    return points


def _convert_ellipse(entity: Entity, context: ConversionContext) -> list[Primitive]:
    dxf = entity.dxf
    center = dxf.get("center")
    major_axis = dxf.get("major_axis")
    if center is None or major_axis is None:
        return []
    major = math.hypot(major_axis[0], major_axis[1])
    if major <= _EPS:
        return []
    minor = major * float(dxf.get("axis_ratio", 1.0))
    rotation = math.atan2(major_axis[1], major_axis[0])
    start = float(dxf.get("start_angle", 0.0))
    sweep = _sweep(start, dxf.get("end_angle", _TWO_PI))
    if sweep is None:
        return []
    points = _ellipse_points(center, major, minor, rotation, start, sweep, context.ellipse_segments)
    closed = math.isclose(sweep, _TWO_PI)
    if closed:
        points[-1] = points[0]
    return [_primitive(entity, LINE_STRIP, points, closed=closed)]


def _convert_spline(entity: Entity, context: ConversionContext) -> list[Primitive]:
    dxf = entity.dxf
    control_points = [point for point in (dxf.get("control_points") or []) if point is not None]
    if len(control_points) >= 2:
        points = sample(
            int(dxf.get("degree", 3)),
            control_points,
            dxf.get("knots") or None,
            dxf.get("weights") or None,
            segments=context.spline_segments,
        )
        return [_primitive(entity, CURVE, points, closed=bool(dxf.get("closed", False)))]

    fit_points = [point for point in (dxf.get("fit_points") or []) if point is not None]
    if len(fit_points) >= 2:
        return [_primitive(entity, CURVE, fit_points, closed=bool(dxf.get("closed", False)))]
    return []


def _convert_text(entity: Entity, context: ConversionContext) -> list[Primitive]:
    shaper = context.text_shaper
    dxf = entity.dxf
    text = str(dxf.get("text") or "")
    if shaper is None or text == "":
        return []
    placement = _text_placement(dxf)
    outlines = shaper.shape_text(text, float(dxf.get("height", 1.0)))
    return [
        _primitive(entity, TEXT_OUTLINE, _outline_points(outline), transform=placement, closed=True)
        for outline in outlines
    ]


def _convert_mtext(entity: Entity, context: ConversionContext) -> list[Primitive]:
    shaper = context.text_shaper
    dxf = entity.dxf
    raw_text = str(dxf.get("text") or "")
    if shaper is None or raw_text == "":
        return []

    plain_text, directives = context.content_parser(raw_text)
    height = height_from_directives(directives, float(dxf.get("char_height", 1.0)))
    if height <= 0.0:
        return []
    width = float(dxf.get("width", 0.0) or 0.0)
    lines: list[str] = []
    for paragraph in plain_text.split("\n"):
        lines.extend(_wrap_line(shaper, paragraph, height, width))

    factor, vertical = _MTEXT_ATTACHMENT.get(int(dxf.get("attachment_point", 1) or 1), (0.0, "top"))
    pitch = height * _MTEXT_LINE_SPACING
    block_height = height + pitch * (len(lines) - 1)
    if vertical == "top":
        baseline = -height
    elif vertical == "middle":
        baseline = block_height / 2.0 - height
    else:
        baseline = block_height - height

    placement = _text_placement(dxf)
    primitives: list[Primitive] = []
    for index, line in enumerate(lines):
        if not line.strip():
            continue
        outlines = shaper.shape_text(line, height)
        xs = [x for outline in outlines for x, _ in outline]
        if not xs:
            continue
        dx = -factor * max(xs)
        dy = baseline - index * pitch
        for outline in outlines:
            primitives.append(
                _primitive(
                    entity,
                    TEXT_OUTLINE,
                    [(x + dx, y + dy, 0.0) for x, y in outline],
                    transform=placement,
                    closed=True,
                )
            )
    return primitives


def _wrap_line(shaper: TextShaper, paragraph: str, height: float, width: float) -> list[str]:
    if width <= 0.0 or not paragraph:
        return [paragraph]
    lines: list[str] = []
    current = ""
    for word in paragraph.split(" "):
        candidate = word if not current else f"{current} {word}"
        if current and text_width(shaper, candidate, height) > width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


def _convert_insert(
    entity: Entity,
    context: ConversionContext,
    block_stack: tuple[str, ...],
) -> list[Primitive]:
    dxf = entity.dxf
    name = dxf.get("name")
    block = context.blocks.get(name) if isinstance(name, str) and name else None
    if block is None:
        logger.debug("INSERT %s references unknown block %r", entity.handle, name)
        return []
    if name in block_stack or len(block_stack) >= context.max_block_depth:
        logger.debug("INSERT %s: recursive or too deep reference to block %r", entity.handle, name)
        return []

    placement = Transform.from_insert(
        dxf.get("insert") or _ORIGIN,
        rotation=math.radians(float(dxf.get("rotation", 0.0))),
        scale=(
            float(dxf.get("xscale", 1.0)),
            float(dxf.get("yscale", 1.0)),
            float(dxf.get("zscale", 1.0)),
        ),
        base_point=block.base_point,
    )
    stack = (*block_stack, name)
    primitives: list[Primitive] = []
    for child in block.entities:
        for primitive in _convert(child, context, stack):
            primitives.append(primitive.transformed(placement))
    return primitives


def _sweep(start_angle: Any, end_angle: Any) -> float | None:
    delta = float(end_angle) - float(start_angle)
    same = abs(delta) < _EPS
    delta %= _TWO_PI
    if delta < _EPS:
        if same:
            return None
        delta = _TWO_PI
    return delta


def _ellipse_points(
    center: Point3D,
    major: float,
    minor: float,
    rotation: float,
    start: float,
    sweep: float,
    segments: int,
) -> list[Point3D]:
    steps = max(1, int(segments))
    cos_r = math.cos(rotation)
    sin_r = math.sin(rotation)
    cz = center[2] if len(center) > 2 else 0.0
    points: list[Point3D] = []
    for k in range(steps + 1):
        angle = start + sweep * k / steps
        x = major * math.cos(angle)
        y = minor * math.sin(angle)
        points.append((center[0] + x * cos_r - y * sin_r, center[1] + x * sin_r + y * cos_r, cz))
    return points


def _text_placement(dxf: Mapping[str, Any]) -> Transform:
    insert = dxf.get("insert") or _ORIGIN
    rotation = math.radians(float(dxf.get("rotation", 0.0) or 0.0))
    return Transform.translation(*insert).compose(Transform.rotation_z(rotation))


def _outline_points(outline: Outline) -> list[Point3D]:
    return [(float(x), float(y), 0.0) for x, y in outline]


def _primitive(
    entity: Entity,
    kind: str,
    points: Sequence[Sequence[float]],
    **kwargs: Any,
) -> Primitive:
    return Primitive(
        kind=kind,
        points=tuple(_as_point3(point) for point in points),
        dxftype=entity.dxftype,
        layer=entity.layer,
        handle=entity.handle,
        **kwargs,
    )


def _as_point3(point: Sequence[float]) -> Point3D:
    if len(point) >= 3:
        return (float(point[0]), float(point[1]), float(point[2]))
    return (float(point[0]), float(point[1]), 0.0)
