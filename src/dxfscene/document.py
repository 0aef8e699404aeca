from __future__ import annotations

import fnmatch
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

from .entity import Entity, Point3D

SUPPORTED_ENTITY_TYPES = (
    "LINE",
    "LWPOLYLINE",
    "POLYLINE",
    "CIRCLE",
    "ARC",
    "ELLIPSE",
    "SPLINE",
    "POINT",
    "SOLID",
    "TEXT",
    "MTEXT",
    "INSERT",
)

DEFAULT_LAYER = "0"

_ORIGIN: Point3D = (0.0, 0.0, 0.0)
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_COMMON_KEYS = {"type", "handle", "layer", "color", "lineType", "colorIndex", "ownerHandle"}
_LINETYPE_PLACEHOLDERS = {"BYLAYER", "BYBLOCK"}


@dataclass(frozen=True)
class Layer:
    name: str
    color: int | None = None
    line_type: str | None = None


@dataclass(frozen=True)
class LineType:
    name: str
    pattern: tuple[float, ...] = ()
    description: str = ""


@dataclass(frozen=True)
class Block:
    name: str
    entities: tuple[Entity, ...] = ()
    base_point: Point3D = _ORIGIN


@dataclass(frozen=True)
class Document:
    entities: tuple[Entity, ...] = ()
    layers: Mapping[str, Layer] = field(default_factory=dict)
    line_types: Mapping[str, LineType] = field(default_factory=dict)
    blocks: Mapping[str, Block] = field(default_factory=dict)
    path: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], path: str | None = None) -> "Document":
        """Build a document from a dxf-parser style mapping.

        Expected shape: ``{"tables": {"layer": {"layers": ...}, "lineType":
        {"lineTypes": ...}}, "blocks": ..., "entities": [...]}``. Missing
        tables and blocks are treated as empty.
        """
        tables = data.get("tables") or {}
        layer_rows = (tables.get("layer") or {}).get("layers") or {}
        line_type_rows = (tables.get("lineType") or {}).get("lineTypes") or {}

        layers = {
            str(name): Layer(
                name=str(name),
                color=_int_or_none(row.get("color")),
                line_type=row.get("lineType") or None,
            )
            for name, row in layer_rows.items()
        }
        line_types = {
            str(name): LineType(
                name=str(name),
                pattern=tuple(float(v) for v in (row.get("pattern") or [])),
                description=str(row.get("description") or ""),
            )
            for name, row in line_type_rows.items()
        }
        blocks = {}
        for name, row in (data.get("blocks") or {}).items():
            blocks[str(name)] = Block(
                name=str(name),
                entities=tuple(entity_from_dict(item) for item in (row.get("entities") or [])),
                base_point=_point3(row.get("position")) or _ORIGIN,
            )
        entities = tuple(entity_from_dict(item) for item in (data.get("entities") or []))
        return cls(
            entities=entities,
            layers=layers,
            line_types=line_types,
            blocks=blocks,
            path=path,
        )

    def query(self, types: str | Iterable[str] | None = None) -> Iterator[Entity]:
        selected = _normalize_types(types)
        for entity in self.entities:
            if selected is None or entity.dxftype in selected:
                yield entity

    def plot(self, *args, **kwargs):
        from .render import plot

        return plot(self, *args, **kwargs)


def read(path: str) -> Document:
    """Read a DXF file through ezdxf into a ``Document``."""
    ezdxf = _require_ezdxf()
    dxf_doc = ezdxf.readfile(path)

    layers: dict[str, Layer] = {}
    for layer in dxf_doc.layers:
        name = str(layer.dxf.name)
        layers[name] = Layer(
            name=name,
            color=_ezdxf_color(layer),
            line_type=str(layer.dxf.get("linetype", "") or "") or None,
        )

    line_types: dict[str, LineType] = {}
    for ltype in dxf_doc.linetypes:
        name = str(ltype.dxf.name)
        line_types[name] = LineType(
            name=name,
            pattern=_ezdxf_linetype_pattern(ltype),
            description=str(ltype.dxf.get("description", "") or ""),
        )

    blocks: dict[str, Block] = {}
    for block_layout in dxf_doc.blocks:
        name = str(block_layout.name)
        if block_layout.is_any_layout:
            continue
        base = block_layout.block.dxf.get("base_point", _ORIGIN)
        blocks[name] = Block(
            name=name,
            entities=tuple(_entity_from_ezdxf(e, layers) for e in block_layout),
            base_point=_point3(base) or _ORIGIN,
        )

    entities = tuple(_entity_from_ezdxf(e, layers) for e in dxf_doc.modelspace())
    return Document(
        entities=entities,
        layers=layers,
        line_types=line_types,
        blocks=blocks,
        path=str(path),
    )


def _require_ezdxf():
    try:
        import ezdxf
    except Exception as exc:
        raise ImportError(
            "ezdxf is required for reading DXF files. "
            'Install it with `pip install "dxfscene[dxf]"`.'
        ) from exc
    return ezdxf


def entity_from_dict(row: Mapping[str, Any]) -> Entity:
    dxftype = str(row.get("type") or "").strip().upper()
    dxf: dict[str, Any] = {
        "layer": row.get("layer"),
        "color": _int_or_none(row.get("color")),
        "line_type": row.get("lineType") or None,
    }
    try:
        dxf.update(_entity_fields(dxftype, row))
    except (TypeError, ValueError):
        # Keep the entity with its common fields only; conversion skips it.
        pass
    return Entity(dxftype=dxftype, handle=row.get("handle"), dxf=dxf)


def _entity_fields(dxftype: str, row: Mapping[str, Any]) -> dict[str, Any]:
    dxf: dict[str, Any] = {}
    if dxftype == "LINE":
        vertices = [_point3(v) for v in (row.get("vertices") or [])]
        if len(vertices) == 2:
            dxf["start"] = vertices[0]
            dxf["end"] = vertices[1]
    elif dxftype in {"LWPOLYLINE", "POLYLINE"}:
        vertices = list(row.get("vertices") or [])
        dxf["points"] = [_point3(v) for v in vertices]
        dxf["bulges"] = [float(_get(v, "bulge", 0.0) or 0.0) for v in vertices]
        dxf["closed"] = bool(row.get("shape") or row.get("closed"))
    elif dxftype in {"CIRCLE", "ARC"}:
        dxf["center"] = _point3(row.get("center"))
        dxf["radius"] = float(row.get("radius", 0.0))
        if dxftype == "ARC":
            dxf["start_angle"] = float(row.get("startAngle", 0.0))
            dxf["end_angle"] = float(row.get("endAngle", 2.0 * math.pi))
    elif dxftype == "ELLIPSE":
        dxf["center"] = _point3(row.get("center"))
        dxf["major_axis"] = _point3(row.get("majorAxisEndPoint"))
        dxf["axis_ratio"] = float(row.get("axisRatio", 1.0))
        dxf["start_angle"] = float(row.get("startAngle", 0.0))
        dxf["end_angle"] = float(row.get("endAngle", 2.0 * math.pi))
    elif dxftype == "SPLINE":
        dxf["control_points"] = [_point3(p) for p in (row.get("controlPoints") or [])]
        dxf["fit_points"] = [_point3(p) for p in (row.get("fitPoints") or [])]
        dxf["degree"] = int(row.get("degreeOfSplineCurve", 3))
        knots = row.get("knotValues")
        dxf["knots"] = [float(k) for k in knots] if knots else None
        weights = row.get("weights")
        dxf["weights"] = [float(w) for w in weights] if weights else None
        dxf["closed"] = bool(row.get("closed"))
    elif dxftype == "POINT":
        dxf["location"] = _point3(row.get("position"))
    elif dxftype == "SOLID":
        dxf["points"] = [_point3(p) for p in (row.get("points") or [])]
    elif dxftype == "TEXT":
        dxf["text"] = str(row.get("text") or "")
        dxf["insert"] = _point3(row.get("startPoint"))
        dxf["height"] = float(row.get("textHeight", 1.0))
        dxf["rotation"] = float(row.get("rotation", 0.0))
    elif dxftype == "MTEXT":
        dxf["text"] = str(row.get("text") or "")
        dxf["insert"] = _point3(row.get("position"))
        dxf["char_height"] = float(row.get("height", 1.0))
        dxf["width"] = float(row.get("width", 0.0) or 0.0)
        dxf["attachment_point"] = int(row.get("attachmentPoint", 1) or 1)
        dxf["rotation"] = float(row.get("rotation", 0.0))
    elif dxftype == "INSERT":
        dxf["name"] = row.get("name")
        dxf["insert"] = _point3(row.get("position")) or _ORIGIN
        dxf["xscale"] = float(row.get("xScale", 1.0))
        dxf["yscale"] = float(row.get("yScale", 1.0))
        dxf["zscale"] = float(row.get("zScale", 1.0))
        dxf["rotation"] = float(row.get("rotation", 0.0))
    else:
        for key, value in row.items():
            if key not in _COMMON_KEYS:
                dxf[_snake_case(key)] = value
    return dxf


def _entity_from_ezdxf(e: Any, layers: Mapping[str, Layer]) -> Entity:
    dxftype = str(e.dxftype())
    attribs = e.dxf
    layer_name = str(attribs.get("layer", DEFAULT_LAYER))
    dxf: dict[str, Any] = {
        "layer": layer_name,
        "color": _ezdxf_color(e),
        "line_type": _ezdxf_entity_line_type(e, layers.get(layer_name)),
    }

    if dxftype == "LINE":
        dxf["start"] = _point3(attribs.start)
        dxf["end"] = _point3(attribs.end)
    elif dxftype == "LWPOLYLINE":
        elevation = float(attribs.get("elevation", 0.0))
        rows = list(e.get_points("xyb"))
        dxf["points"] = [(float(x), float(y), elevation) for x, y, _ in rows]
        dxf["bulges"] = [float(b) for _, _, b in rows]
        dxf["closed"] = bool(e.closed)
    elif dxftype == "POLYLINE":
        vertices = list(e.vertices)
        dxf["points"] = [_point3(v.dxf.location) for v in vertices]
        dxf["bulges"] = [float(v.dxf.get("bulge", 0.0)) for v in vertices]
        dxf["closed"] = bool(e.is_closed)
    elif dxftype in {"CIRCLE", "ARC"}:
        dxf["center"] = _point3(attribs.center)
        dxf["radius"] = float(attribs.radius)
        if dxftype == "ARC":
            dxf["start_angle"] = math.radians(float(attribs.start_angle))
            dxf["end_angle"] = math.radians(float(attribs.end_angle))
    elif dxftype == "ELLIPSE":
        dxf["center"] = _point3(attribs.center)
        dxf["major_axis"] = _point3(attribs.major_axis)
        dxf["axis_ratio"] = float(attribs.ratio)
        dxf["start_angle"] = float(attribs.start_param)
        dxf["end_angle"] = float(attribs.end_param)
    elif dxftype == "SPLINE":
        dxf["control_points"] = [_point3(p) for p in e.control_points]
        dxf["fit_points"] = [_point3(p) for p in e.fit_points]
        dxf["degree"] = int(attribs.degree)
        dxf["knots"] = [float(k) for k in e.knots] or None
        dxf["weights"] = [float(w) for w in e.weights] or None
        dxf["closed"] = bool(e.closed)
    elif dxftype == "POINT":
        dxf["location"] = _point3(attribs.location)
    elif dxftype == "SOLID":
        dxf["points"] = [
            _point3(attribs.get(name))
            for name in ("vtx0", "vtx1", "vtx2", "vtx3")
            if attribs.hasattr(name)
        ]
    elif dxftype == "TEXT":
        dxf["text"] = str(attribs.get("text", ""))
        dxf["insert"] = _point3(attribs.insert)
        dxf["height"] = float(attribs.get("height", 1.0))
        dxf["rotation"] = float(attribs.get("rotation", 0.0))
    elif dxftype == "MTEXT":
        dxf["text"] = str(e.text)
        dxf["insert"] = _point3(attribs.insert)
        dxf["char_height"] = float(attribs.get("char_height", 1.0))
        dxf["width"] = float(attribs.get("width", 0.0))
        dxf["attachment_point"] = int(attribs.get("attachment_point", 1))
        dxf["rotation"] = float(attribs.get("rotation", 0.0))
    elif dxftype == "INSERT":
        dxf["name"] = str(attribs.name)
        dxf["insert"] = _point3(attribs.insert)
        dxf["xscale"] = float(attribs.get("xscale", 1.0))
        dxf["yscale"] = float(attribs.get("yscale", 1.0))
        dxf["zscale"] = float(attribs.get("zscale", 1.0))
        dxf["rotation"] = float(attribs.get("rotation", 0.0))

    return Entity(dxftype=dxftype, handle=attribs.get("handle"), dxf=dxf)


def _ezdxf_color(item: Any) -> int | None:
    attribs = item.dxf
    if attribs.hasattr("true_color"):
        return int(attribs.true_color) & 0xFFFFFF
    try:
        aci = abs(int(attribs.get("color", 256)))
    except (TypeError, ValueError):
        return None
    if not 1 <= aci <= 255:
        return None
    from ezdxf.colors import aci2rgb

    r, g, b = aci2rgb(aci)
    return (int(r) << 16) | (int(g) << 8) | int(b)


def _ezdxf_entity_line_type(e: Any, layer: Layer | None) -> str | None:
    name = str(e.dxf.get("linetype", "BYLAYER") or "BYLAYER")
    if name.upper() == "BYLAYER":
        return layer.line_type if layer is not None else None
    if name.upper() in _LINETYPE_PLACEHOLDERS:
        return None
    return name


def _ezdxf_linetype_pattern(ltype: Any) -> tuple[float, ...]:
    pattern_tags = getattr(ltype, "pattern_tags", None)
    tags = getattr(pattern_tags, "tags", None)
    if tags is None:
        return ()
    # Group code 49 holds the signed dash/gap/dot lengths.
    return tuple(float(tag.value) for tag in tags if tag.code == 49)


def _normalize_types(types: str | Iterable[str] | None) -> set[str] | None:
    if types is None:
        return None
    if isinstance(types, str):
        tokens = re.split(r"[,\s]+", types.strip())
    else:
        tokens = list(types)

    normalized = [token.strip().upper() for token in tokens if token and token.strip()]
    if not normalized or any(token in {"*", "ALL"} for token in normalized):
        return None

    selected: set[str] = set()
    for token in normalized:
        if any(ch in token for ch in "*?[]"):
            selected.update(
                name for name in SUPPORTED_ENTITY_TYPES if fnmatch.fnmatchcase(name, token)
            )
            continue
        selected.add(token)
    return selected


def _get(value: Any, key: str, default: Any = None) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, default)
    return default


def _point3(value: Any) -> Point3D | None:
    if value is None:
        return None
    if isinstance(value, Mapping):
        return (
            float(value.get("x", 0.0) or 0.0),
            float(value.get("y", 0.0) or 0.0),
            float(value.get("z", 0.0) or 0.0),
        )
    items = list(value)
    if len(items) >= 3:
        return (float(items[0]), float(items[1]), float(items[2]))
    if len(items) >= 2:
        return (float(items[0]), float(items[1]), 0.0)
    raise ValueError(f"invalid point value: {value!r}")


def _int_or_none(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _snake_case(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", str(name)).lower()
