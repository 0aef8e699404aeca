from __future__ import annotations

from dxfscene.document import Layer, LineType
from dxfscene.entity import Entity
from dxfscene.styles import build_dash_pattern, color_to_hex, resolve_color


def _entity(**dxf) -> Entity:
    return Entity(dxftype="LINE", handle="1", dxf={"layer": "0", **dxf})


def test_entity_color_wins_over_layer_color() -> None:
    layers = {"0": Layer(name="0", color=0x00FF00)}
    assert resolve_color(_entity(color=0xFF0000), layers) == 0xFF0000


def test_entity_black_is_not_treated_as_unset() -> None:
    layers = {"0": Layer(name="0", color=0x00FF00)}
    assert resolve_color(_entity(color=0), layers) == 0x000000


def test_layer_color_used_when_entity_has_none() -> None:
    layers = {"WALLS": Layer(name="WALLS", color=0x123456)}
    entity = _entity(layer="WALLS")
    assert resolve_color(entity, layers) == 0x123456


def test_white_layer_color_falls_back_to_default() -> None:
    layers = {"0": Layer(name="0", color=0xFFFFFF)}
    assert resolve_color(_entity(), layers) == 0x000000
    assert resolve_color(_entity(), layers, default_color=0x808080) == 0x808080


def test_missing_layer_falls_back_to_default() -> None:
    assert resolve_color(_entity(layer="NOPE"), {}) == 0x000000


def test_entity_without_layer_uses_default_layer() -> None:
    layers = {"BASE": Layer(name="BASE", color=0x0000FF)}
    entity = Entity(dxftype="LINE", handle=None, dxf={})
    assert resolve_color(entity, layers, default_layer="BASE") == 0x0000FF


def test_dash_pattern_uses_absolute_lengths() -> None:
    line_types = {"DASHED": LineType(name="DASHED", pattern=(5.0, -5.0))}
    assert build_dash_pattern(_entity(line_type="DASHED"), line_types) == (5.0, 5.0)


def test_dash_pattern_keeps_dots_and_order() -> None:
    line_types = {"DASHDOT": LineType(name="DASHDOT", pattern=(10.0, -2.0, 0.0, -2.0))}
    assert build_dash_pattern(_entity(line_type="DASHDOT"), line_types) == (10.0, 2.0, 0.0, 2.0)


def test_solid_lines_have_no_dash_pattern() -> None:
    line_types = {"CONTINUOUS": LineType(name="CONTINUOUS")}
    assert build_dash_pattern(_entity(), line_types) is None
    assert build_dash_pattern(_entity(line_type="CONTINUOUS"), line_types) is None
    assert build_dash_pattern(_entity(line_type="UNKNOWN"), line_types) is None


def test_color_to_hex() -> None:
    assert color_to_hex(0xFF8000) == "#ff8000"
    assert color_to_hex(0) == "#000000"
