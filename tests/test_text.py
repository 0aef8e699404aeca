from __future__ import annotations

import pytest
from _fixtures import BoxTextShaper

from dxfscene.text import MatplotlibTextShaper, text_width


def test_text_width_is_rightmost_outline_x() -> None:
    assert text_width(BoxTextShaper(), "ab", 10.0) == pytest.approx(11.0)
    assert text_width(BoxTextShaper(), " ", 10.0) == 0.0


def test_matplotlib_shaper_produces_outlines() -> None:
    pytest.importorskip("matplotlib")
    shaper = MatplotlibTextShaper()

    outlines = shaper.shape_text("H", 10.0)
    assert outlines
    xs = [x for outline in outlines for x, _ in outline]
    ys = [y for outline in outlines for _, y in outline]
    assert min(xs) >= 0.0
    assert 0.0 < max(ys) <= 10.0

    wide = text_width(shaper, "HH", 10.0)
    assert wide > text_width(shaper, "H", 10.0)


def test_matplotlib_shaper_handles_empty_and_dollar_text() -> None:
    pytest.importorskip("matplotlib")
    shaper = MatplotlibTextShaper()
    assert shaper.shape_text("", 10.0) == []
    assert shaper.shape_text("A", 0.0) == []
    assert shaper.shape_text("$5", 10.0)
