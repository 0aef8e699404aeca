from __future__ import annotations

import pytest
from _fixtures import mock_dxf_data

import dxfscene.render as render_module
from dxfscene.primitives import (
    FILLED_POLYGON,
    LINE_STRIP,
    POINT,
    TEXT_OUTLINE,
    Primitive,
    Transform,
)


class _FakeAx:
    def __init__(self) -> None:
        self.plots: list[tuple[list[float], list[float], dict]] = []
        self.fills: list[tuple[list[float], list[float], dict]] = []

    def plot(self, xs, ys, **kwargs) -> None:
        self.plots.append((list(xs), list(ys), kwargs))

    def fill(self, xs, ys, **kwargs) -> None:
        self.fills.append((list(xs), list(ys), kwargs))


def test_backend_draws_line_strip_with_color_and_dashes() -> None:
    ax = _FakeAx()
    backend = render_module.MatplotlibBackend(ax, line_width=1.5)
    backend.add(
        Primitive(
            kind=LINE_STRIP,
            points=((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0)),
            color=0xFF0000,
            dash_pattern=(5.0, 0.0),
            closed=True,
        )
    )
    (xs, ys, kwargs) = ax.plots[0]
    assert xs == [0.0, 1.0, 1.0, 0.0]
    assert ys == [0.0, 0.0, 1.0, 0.0]
    assert kwargs["color"] == "#ff0000"
    assert kwargs["linewidth"] == 1.5
    assert kwargs["dashes"] == [5.0, 0.5]


def test_backend_applies_primitive_transform() -> None:
    ax = _FakeAx()
    render_module.MatplotlibBackend(ax).add(
        Primitive(
            kind=LINE_STRIP,
            points=((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
            transform=Transform.translation(10, 20),
        )
    )
    xs, ys, kwargs = ax.plots[0]
    assert xs == [10.0, 11.0]
    assert ys == [20.0, 20.0]
    assert "dashes" not in kwargs


def test_backend_fills_triangles_and_marks_points() -> None:
    ax = _FakeAx()
    backend = render_module.MatplotlibBackend(ax)
    backend.add(
        Primitive(
            kind=FILLED_POLYGON,
            points=((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), (1.0, 1.0, 0.0)),
            triangles=((0, 1, 2), (1, 3, 2)),
            color=0x00FF00,
        )
    )
    backend.add(Primitive(kind=POINT, points=((2.0, 3.0, 0.0),)))
    assert len(ax.fills) == 2
    assert ax.fills[1][0] == [1.0, 1.0, 0.0]
    assert ax.fills[0][2]["color"] == "#00ff00"
    xs, ys, kwargs = ax.plots[0]
    assert (xs, ys) == ([2.0], [3.0])
    assert kwargs["marker"] == "."


def test_backend_dispatches_by_kind(monkeypatch) -> None:
    calls: list[tuple[str, bool]] = []
    monkeypatch.setattr(
        render_module,
        "_draw_polyline",
        lambda _ax, points, _width, color=None, dashes=None, closed=False: calls.append(
            (color, closed)
        ),
    )
    backend = render_module.MatplotlibBackend(object())
    backend.add(Primitive(kind=TEXT_OUTLINE, points=((0.0, 0.0, 0.0), (1.0, 0.0, 0.0)), color=0x0000FF))
    backend.add(Primitive(kind=LINE_STRIP, points=()))
    assert calls == [("#0000ff", True)]


def test_matplotlib_dashes() -> None:
    assert render_module._matplotlib_dashes(None) is None
    assert render_module._matplotlib_dashes(()) is None
    assert render_module._matplotlib_dashes((4.0, 2.0)) == [4.0, 2.0]
    assert render_module._matplotlib_dashes((4.0, 2.0, 0.0)) == [4.0, 2.0, 0.5, 4.0, 2.0, 0.5]


def test_plot_fits_axes_to_scene() -> None:
    matplotlib = pytest.importorskip("matplotlib")
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    ax = render_module.plot(mock_dxf_data("line", "circle"), show=False, text=False, title="mock")
    try:
        assert ax.get_title() == "mock"
        assert len(ax.lines) == 2
        x_min, x_max = ax.get_xlim()
        assert x_min < 0.0 and x_max > 10.0
    finally:
        plt.close(ax.figure)
