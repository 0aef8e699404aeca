from __future__ import annotations

from dataclasses import dataclass
from typing import Any

Point3D = tuple[float, float, float]


@dataclass(frozen=True)
class Entity:
    dxftype: str
    handle: int | str | None
    dxf: dict[str, Any]

    @property
    def layer(self) -> str | None:
        layer = self.dxf.get("layer")
        return str(layer) if layer is not None else None

    @property
    def color(self) -> int | None:
        color = self.dxf.get("color")
        if color is None:
            return None
        try:
            return int(color)
        except (TypeError, ValueError):
            return None

    @property
    def line_type(self) -> str | None:
        name = self.dxf.get("line_type")
        return str(name) if name else None
