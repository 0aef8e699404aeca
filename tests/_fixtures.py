from __future__ import annotations

import copy
import math
from typing import Any

_ENTITY_TEMPLATES: dict[str, dict[str, Any]] = {
    "line": {
        "type": "LINE",
        "vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 10}],
        "layer": "0",
    },
    "lwpolyline": {
        "type": "LWPOLYLINE",
        "vertices": [{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 10, "y": 10}],
        "layer": "0",
    },
    "circle": {
        "type": "CIRCLE",
        "center": {"x": 5, "y": 5, "z": 0},
        "radius": 5,
        "layer": "0",
    },
    "arc": {
        "type": "ARC",
        "center": {"x": 5, "y": 5, "z": 0},
        "radius": 5,
        "startAngle": 0,
        "endAngle": math.pi,
        "layer": "0",
    },
    "spline": {
        "type": "SPLINE",
        "controlPoints": [{"x": 0, "y": 0}, {"x": 5, "y": 10}, {"x": 10, "y": 0}],
        "degreeOfSplineCurve": 2,
        "knotValues": [0, 0, 0, 1, 1, 1],
        "layer": "0",
    },
    "ellipse": {
        "type": "ELLIPSE",
        "center": {"x": 5, "y": 5, "z": 0},
        "majorAxisEndPoint": {"x": 10, "y": 0, "z": 0},
        "axisRatio": 0.5,
        "startAngle": 0,
        "endAngle": math.pi * 2,
        "layer": "0",
    },
    "point": {
        "type": "POINT",
        "position": {"x": 5, "y": 5, "z": 0},
        "layer": "0",
    },
    "solid": {
        "type": "SOLID",
        "points": [{"x": 0, "y": 0}, {"x": 10, "y": 0}, {"x": 0, "y": 10}, {"x": 10, "y": 10}],
        "layer": "0",
    },
    "text": {
        "type": "TEXT",
        "text": "Test",
        "startPoint": {"x": 0, "y": 0, "z": 0},
        "textHeight": 5,
        "layer": "0",
    },
    "mtext": {
        "type": "MTEXT",
        "text": "Test MText",
        "position": {"x": 0, "y": 0, "z": 0},
        "height": 5,
        "width": 50,
        "layer": "0",
        "attachmentPoint": 1,
    },
    "block": {
        "type": "INSERT",
        "name": "TEST_BLOCK",
        "position": {"x": 0, "y": 0, "z": 0},
        "layer": "0",
    },
}


def mock_dxf_data(*entity_types: str, **overrides: Any) -> dict[str, Any]:
    """dxf-parser style document holding one templated entity per type."""
    data: dict[str, Any] = {
        "tables": {
            "layer": {"layers": {"0": {"color": 0xFFFFFF}}},
            "lineType": {"lineTypes": {}},
        },
        "blocks": {},
        "entities": [],
    }
    for entity_type in entity_types:
        template = _ENTITY_TEMPLATES[entity_type.lower()]
        data["entities"].append(copy.deepcopy({**template, **overrides}))
        if entity_type.lower() == "block":
            data["blocks"][overrides.get("name", "TEST_BLOCK")] = {
                "entities": [
                    {
                        "type": "LINE",
                        "vertices": [{"x": 0, "y": 0}, {"x": 5, "y": 5}],
                        "layer": "0",
                    }
                ]
            }
    return data


class BoxTextShaper:
    """Shapes every non-space character as a box, advancing 0.6 * size."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, float]] = []

    def shape_text(self, text: str, size: float) -> list[list[tuple[float, float]]]:
        self.calls.append((text, size))
        advance = 0.6 * size
        outlines = []
        for i, ch in enumerate(text):
            if ch.isspace():
                continue
            x0 = i * advance
            x1 = x0 + 0.5 * size
            outlines.append([(x0, 0.0), (x1, 0.0), (x1, size), (x0, size)])
        return outlines
