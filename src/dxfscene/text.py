from __future__ import annotations

from typing import Protocol, Sequence

Outline = list[tuple[float, float]]


class TextShaper(Protocol):
    def shape_text(self, text: str, size: float) -> Sequence[Outline]:
        """Return glyph outlines of ``text`` at ``size``, baseline origin at (0, 0)."""
        ...


class MatplotlibTextShaper:
    """Text shaper backed by ``matplotlib.textpath.TextPath``.

    The font is resolved once at construction, so shaping never waits on
    font loading.
    """

    def __init__(self, family: str | Sequence[str] = "sans-serif") -> None:
        _require_matplotlib()
        from matplotlib.font_manager import FontProperties

        self._prop = FontProperties(family=family)

    def shape_text(self, text: str, size: float) -> list[Outline]:
        if not text or size <= 0.0:
            return []
        from matplotlib.textpath import TextPath

        path = TextPath((0.0, 0.0), text.replace("$", r"\$"), size=float(size), prop=self._prop)
        outlines: list[Outline] = []
        for polygon in path.to_polygons(closed_only=False):
            outline = [(float(x), float(y)) for x, y in polygon]
            if len(outline) >= 2:
                outlines.append(outline)
        return outlines


def text_width(shaper: TextShaper, text: str, size: float) -> float:
    xs = [x for outline in shaper.shape_text(text, size) for x, _ in outline]
    if not xs:
        return 0.0
    return max(xs)


def _require_matplotlib():
    try:
        import matplotlib
    except Exception as exc:
        raise ImportError(
            "matplotlib is required for text shaping and plotting. "
            'Install it with `pip install "dxfscene[plot]"`.'
        ) from exc
    return matplotlib
