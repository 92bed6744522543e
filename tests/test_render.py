import matplotlib.pyplot as plt
import pytest

from gapviz.errors import RenderError
from gapviz.grammar import (
    aes,
    facet_grid,
    facet_wrap,
    geom_boxplot,
    geom_line,
    geom_point,
    geom_smooth,
    ggplot,
    labs,
    scale_x_log10,
    scale_y_continuous,
    seq,
    theme,
    theme_minimal,
)
from gapviz.render import draw_plot_into, panel_axes, render
from conftest import CONTINENTS, YEARS


def _scatter(gap):
    return ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp"))


def test_render_single_panel(gap):
    fig = render(_scatter(gap) + geom_point())
    axes = panel_axes(fig)
    assert len(axes) == 1
    assert tuple(fig.get_size_inches()) == (7.0, 7.0)
    assert axes[0].get_xlabel() == "gdpPercap"
    assert axes[0].get_ylabel() == "lifeExp"
    assert len(axes[0].collections) == 1


def test_render_respects_figsize(gap):
    fig = render(_scatter(gap) + geom_point(), figsize=(4, 3), dpi=50)
    assert tuple(fig.get_size_inches()) == (4.0, 3.0)
    assert fig.dpi == 50


def test_one_panel_per_continent(gap):
    p = _scatter(gap) + geom_point(alpha=0.5) + facet_wrap("~ continent", ncol=2, scales="free") + scale_x_log10()
    fig = render(p)
    axes = panel_axes(fig)
    assert len(axes) == gap["continent"].nunique()
    assert [ax.get_title() for ax in axes] == sorted(CONTINENTS)
    assert all(ax.get_xscale() == "log" for ax in axes)


def test_one_panel_per_year(gap):
    p = _scatter(gap) + facet_wrap("~ year") + geom_point() + geom_smooth(method="lm")
    assert len(panel_axes(render(p))) == len(YEARS)


def test_facet_grid_strips(gap):
    data = gap[gap["year"].isin(YEARS[:3])]
    p = ggplot(data=data, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point() + facet_grid("continent ~ year")
    axes = panel_axes(render(p))
    assert len(axes) == len(CONTINENTS) * 3
    assert [ax.get_title() for ax in axes[:3]] == [str(y) for y in YEARS[:3]]


def test_limits_and_breaks(gap):
    p = _scatter(gap) + geom_point() + scale_x_log10() + scale_y_continuous(limits=(0, 100), breaks=seq(0, 100, by=10))
    ax = panel_axes(render(p))[0]
    assert ax.get_ylim() == (0.0, 100.0)
    assert list(ax.get_yticks()) == list(range(0, 101, 10))
    assert ax.get_xscale() == "log"


def test_lines_one_per_country(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="continent", group="country")) + geom_line()
    ax = panel_axes(render(p))[0]
    assert len(ax.lines) == gap["country"].nunique()


def test_smooth_draws_line_and_band_per_group(gap):
    p = _scatter(gap) + geom_point() + scale_x_log10() + geom_smooth(aes(group="continent"), method="lm")
    ax = panel_axes(render(p))[0]
    assert len(ax.lines) == len(CONTINENTS)
    # one scatter plus one band per continent
    assert len(ax.collections) == 1 + len(CONTINENTS)


def test_smooth_without_band(gap):
    p = _scatter(gap) + geom_smooth(method="lm", se=False)
    ax = panel_axes(render(p))[0]
    assert len(ax.lines) == 1
    assert len(ax.collections) == 0


def test_boxplot_per_continent(gap):
    p = ggplot(data=gap, mapping=aes(x="continent", y="lifeExp")) + geom_boxplot()
    ax = panel_axes(render(p))[0]
    assert [t.get_text() for t in ax.get_xticklabels()] == sorted(CONTINENTS)
    assert len(ax.patches) == len(CONTINENTS)


def test_colour_and_shape_on_same_field_share_one_legend(gap):
    p = (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp", color="continent"))
        + geom_point(aes(shape="continent"), size=2)
        + geom_smooth(method="lm")
        + theme_minimal()
        + labs(color="Continents", shape="Continents")
    )
    fig = plt.figure()
    panels = draw_plot_into(p, fig)
    assert len(panels.legends) == 1
    assert panels.legends[0].title == "Continents"
    assert panels.legends[0].labels == sorted(CONTINENTS)
    assert len(fig.legends) == 1


def test_different_titles_keep_separate_legends(gap):
    p = (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp", color="continent", shape="continent"))
        + geom_point()
        + labs(color="Colour")
    )
    fig = plt.figure()
    assert len(draw_plot_into(p, fig).legends) == 2


def test_continuous_colour_gets_colourbar(gap):
    fig = render(_scatter(gap) + geom_point(aes(color="pop")))
    assert any(ax.get_label() == "legend-colorbar" for ax in fig.axes)
    assert len(panel_axes(fig)) == 1


def test_legend_can_be_hidden(gap):
    p = _scatter(gap) + geom_point(aes(color="continent")) + theme(legend_position="none")
    fig = render(p)
    assert len(fig.legends) == 0


def test_title_is_drawn(gap):
    fig = render(_scatter(gap) + geom_point() + labs(title="Effects of per-capita GDP", subtitle="gapminder"))
    texts = [t.get_text() for t in fig.texts]
    assert "Effects of per-capita GDP" in texts
    assert "gapminder" in texts


def test_extra_aesthetic_is_ignored_with_warning(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", continent="continent")) + geom_line(aes(group="country"))
    with pytest.warns(UserWarning, match="Ignoring unknown aesthetics: continent"):
        render(p)


def test_failed_render_leaves_no_open_figure(gap):
    before = len(plt.get_fignums())
    p = ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_smooth(method="loess")
    with pytest.raises(RenderError):
        render(p)
    assert len(plt.get_fignums()) == before


def test_render_rejects_other_objects():
    with pytest.raises(TypeError):
        render("not a plot")


def test_free_discrete_axis_ticks_per_panel(gap):
    p = ggplot(data=gap, mapping=aes(x="country", y="lifeExp")) + geom_boxplot() + facet_wrap("~ continent", scales="free")
    axes = panel_axes(render(p))
    for ax, continent in zip(axes, sorted(CONTINENTS)):
        labels = [t.get_text() for t in ax.get_xticklabels()]
        assert labels == [f"{continent}-{k}" for k in (1, 2, 3)]


def test_constant_x_draws_a_single_box(gap):
    p = ggplot(data=gap, mapping=aes(x=1, y="lifeExp")) + geom_boxplot()
    ax = panel_axes(render(p))[0]
    assert ax.get_xlabel() == "1"
