import pytest

from gapviz.compose import Canvas, draw_label, draw_plot, ggdraw, plot_grid
from gapviz.grammar import aes, geom_boxplot, geom_point, ggplot, last_plot, scale_x_log10, theme_cowplot
from gapviz.render import ggsave, panel_axes, render


def _plot_a(gap):
    return ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point() + scale_x_log10() + theme_cowplot()


def _plot_b(gap):
    return ggplot(data=gap, mapping=aes(x="continent", y="lifeExp")) + geom_boxplot() + theme_cowplot()


def test_grid_of_two_labelled_plots(gap):
    grid = plot_grid(_plot_a(gap), _plot_b(gap), labels=["A", "B"])
    assert len(grid) == 2
    assert grid.labels == ["A", "B"]
    a, b = (p.rect for p in grid.placements)
    assert a.x < b.x
    assert a.y == b.y
    assert grid.overlapping_pairs() == []

    fig = render(grid)
    axes = panel_axes(fig)
    assert len(axes) == 2
    assert axes[0].get_position().x0 < axes[1].get_position().x0
    texts = [t.get_text() for t in fig.texts]
    assert texts.index("A") < texts.index("B")


def test_auto_labels(gap):
    p = _plot_a(gap)
    assert plot_grid(p, p, p, labels="AUTO").labels == ["A", "B", "C"]
    assert plot_grid(p, p, labels="auto").labels == ["a", "b"]
    with pytest.raises(ValueError):
        plot_grid(p, p, labels=["A"])
    with pytest.raises(ValueError):
        plot_grid(p, labels="roman")


def test_default_grid_fills_rows_first(gap):
    p = _plot_a(gap)
    grid = plot_grid(p, p, p)
    rects = [pl.rect for pl in grid.placements]
    assert (rects[0].x, rects[0].y) == (0.0, 0.5)
    assert (rects[1].x, rects[1].y) == (0.5, 0.5)
    assert (rects[2].x, rects[2].y) == (0.0, 0.0)


def test_relative_widths(gap):
    p = _plot_a(gap)
    grid = plot_grid(p, p, rel_widths=[1, 3])
    assert grid.placements[0].rect.width == pytest.approx(0.25)
    assert grid.placements[1].rect.x == pytest.approx(0.25)
    with pytest.raises(ValueError):
        plot_grid(p, p, rel_widths=[1])


def test_grid_too_small(gap):
    p = _plot_a(gap)
    with pytest.raises(ValueError):
        plot_grid(p, p, p, ncol=1, nrow=2)


def test_canvas_side_by_side_does_not_overlap(gap):
    canvas = (
        ggdraw()
        + draw_plot(_plot_a(gap), x=0, y=0, width=0.3, height=1)
        + draw_plot(_plot_b(gap), x=0.3, y=0, width=0.7, height=1)
    )
    assert len(canvas) == 2
    assert canvas.overlapping_pairs() == []
    fig = render(canvas, figsize=(10, 4))
    axes = panel_axes(fig)
    assert len(axes) == 2
    assert axes[0].get_position().x1 <= 0.3 + 1e-9
    assert axes[1].get_position().x0 >= 0.3


def test_canvas_reports_overlap(gap):
    canvas = ggdraw() + draw_plot(_plot_a(gap), 0, 0, 0.6, 1) + draw_plot(_plot_b(gap), 0.5, 0, 0.5, 1)
    assert canvas.overlapping_pairs() == [(0, 1)]


def test_placement_must_fit_on_canvas(gap):
    with pytest.raises(ValueError):
        draw_plot(_plot_a(gap), x=0.8, y=0, width=0.5, height=1)
    with pytest.raises(TypeError):
        draw_plot("plot")
    with pytest.raises(ValueError):
        draw_label("A", x=1.5)


def test_adding_to_canvas_is_immutable(gap):
    empty = ggdraw()
    filled = empty + draw_plot(_plot_a(gap))
    assert len(empty) == 0
    assert len(filled) == 1
    with pytest.raises(TypeError):
        empty + _plot_a(gap)


def test_canvas_text_labels(gap):
    canvas = ggdraw(_plot_a(gap)) + draw_label("DRAFT", x=0.5, y=0.5, size=30, fontface="bold")
    fig = render(canvas)
    assert "DRAFT" in [t.get_text() for t in fig.texts]


def test_canvases_nest(gap):
    inner = plot_grid(_plot_a(gap), _plot_b(gap))
    outer = ggdraw() + draw_plot(inner, 0, 0.5, 1, 0.5) + draw_plot(_plot_a(gap), 0, 0, 1, 0.5)
    assert isinstance(outer, Canvas)
    assert len(panel_axes(render(outer))) == 3


def test_grid_becomes_last_plot_and_exports(gap, tmp_path):
    grid = plot_grid(_plot_a(gap), _plot_b(gap), labels=["A", "B"])
    assert last_plot() is grid
    path = ggsave(tmp_path / "combined_plot.pdf", width=10, height=4, units="in")
    assert path.read_bytes().startswith(b"%PDF")
