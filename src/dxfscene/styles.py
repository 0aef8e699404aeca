from __future__ import annotations

from typing import Mapping

from .document import DEFAULT_LAYER, Layer, LineType
from .entity import Entity

DEFAULT_COLOR = 0x000000
# Plain white on a layer means "not set" in this format.
WHITE = 0xFFFFFF


def resolve_color(
    entity: Entity,
    layers: Mapping[str, Layer],
    *,
    default_color: int = DEFAULT_COLOR,
    default_layer: str = DEFAULT_LAYER,
) -> int:
    color = entity.color
    if color is not None:
        return color & 0xFFFFFF

    layer = layers.get(entity.layer if entity.layer is not None else default_layer)
    if layer is None or layer.color is None:
        return default_color
    color = int(layer.color) & 0xFFFFFF
    if color == WHITE:
        return default_color
    return color


def build_dash_pattern(
    entity: Entity,
    line_types: Mapping[str, LineType],
) -> tuple[float, ...] | None:
    """Return the repeating dash/gap cycle for ``entity`` or None for solid.

    Lengths keep the definition order; negative gap lengths become positive
    and zero-length dots stay zero.
    """
    name = entity.line_type
    if not name:
        return None
    line_type = line_types.get(name)
    if line_type is None or not line_type.pattern:
        return None
    return tuple(abs(float(value)) for value in line_type.pattern)


def color_to_hex(color: int) -> str:
    return f"#{int(color) & 0xFFFFFF:06x}"
