import pandas as pd
import pytest

from gapviz.errors import PlotError, RenderError, UnresolvedFieldError
from gapviz.grammar import aes, facet_grid, facet_wrap, geom_boxplot, geom_line, geom_point, geom_smooth, ggplot, scale_x_log10, scale_y_continuous
from gapviz.render import render, resolve_plot
from conftest import CONTINENTS, COUNTRIES_PER_CONTINENT, YEARS


def test_unknown_field_surfaces_at_render(gap):
    p = ggplot(data=gap, mapping=aes(x="gdp", y="lifeExp")) + geom_point()
    with pytest.raises(UnresolvedFieldError) as info:
        render(p)
    assert info.value.field == "gdp"
    assert info.value.channel == "x"
    assert "gdpPercap" in str(info.value)
    assert isinstance(info.value, PlotError)


def test_unknown_field_in_layer_mapping(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp")) + geom_line(aes(color="region"))
    with pytest.raises(UnresolvedFieldError, match="region"):
        resolve_plot(p)


def test_unknown_facet_field(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp")) + geom_point() + facet_wrap("~ region")
    with pytest.raises(UnresolvedFieldError) as info:
        resolve_plot(p)
    assert info.value.channel == "facet"


def test_plot_without_data(gap):
    with pytest.raises(RenderError, match="no data"):
        resolve_plot(ggplot(mapping=aes(x="year", y="lifeExp")) + geom_point())


def test_layer_data_replaces_plot_data(gap):
    africa = gap[gap["continent"] == "Africa"]
    p = ggplot(mapping=aes(x="year", y="lifeExp")) + geom_point(data=africa)
    resolved = resolve_plot(p)
    assert len(resolved.layers[0].frame) == len(africa)


def test_plot_without_layers(gap):
    with pytest.raises(RenderError, match="no layers"):
        resolve_plot(ggplot(data=gap, mapping=aes(x="year", y="lifeExp")))


def test_missing_required_channel(gap):
    with pytest.raises(RenderError, match="y"):
        resolve_plot(ggplot(data=gap, mapping=aes(x="year")) + geom_point())


def test_boxplot_only_needs_y(gap):
    resolved = resolve_plot(ggplot(data=gap, mapping=aes(y="lifeExp")) + geom_boxplot())
    assert len(resolved.layers[0].frame) == len(gap)


def test_unsupported_smoothing_method(gap):
    p = ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_smooth(method="loess")
    with pytest.raises(RenderError, match="loess"):
        resolve_plot(p)


def test_groups_follow_group_channel(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="continent", group="country")) + geom_line()
    frame = resolve_plot(p).layers[0].frame
    assert frame["GROUP"].nunique() == len(CONTINENTS) * COUNTRIES_PER_CONTINENT


def test_discrete_colour_defines_groups(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="continent")) + geom_point()
    resolved = resolve_plot(p)
    assert resolved.layers[0].frame["GROUP"].nunique() == len(CONTINENTS)
    assert resolved.discrete["color"] is True


def test_continuous_colour_does_not_group(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="pop")) + geom_point()
    resolved = resolve_plot(p)
    assert resolved.layers[0].frame["GROUP"].nunique() == 1
    assert resolved.discrete["color"] is False


def test_rows_outside_limits_are_dropped_with_warning(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp")) + geom_point() + scale_y_continuous(limits=(0, 50))
    with pytest.warns(UserWarning, match="Removed"):
        resolved = resolve_plot(p)
    kept = resolved.layers[0].frame
    assert len(kept) == int((gap["lifeExp"] <= 50).sum())
    assert kept["y"].max() <= 50


def test_nonpositive_values_dropped_on_log_scale(gap):
    data = gap.copy()
    data.loc[0, "gdpPercap"] = 0.0
    p = ggplot(data=data, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point() + scale_x_log10()
    with pytest.warns(UserWarning, match="Removed 1 rows"):
        resolved = resolve_plot(p)
    assert len(resolved.layers[0].frame) == len(data) - 1


def test_wrap_panels_are_sorted_distinct_values(gap):
    p = ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point() + facet_wrap("~ continent", ncol=2)
    resolved = resolve_plot(p)
    assert resolved.n_panels == gap["continent"].nunique()
    assert [resolved.panel_label(i) for i in range(resolved.n_panels)] == sorted(CONTINENTS)
    assert resolved.grid == (3, 2)
    assert resolved.positions[2] == (1, 0)


def test_default_wrap_is_roughly_square(gap):
    p = ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point() + facet_wrap("~ year")
    assert resolve_plot(p).grid == (3, 4)


def test_grid_panels_cross_rows_and_columns(gap):
    data = gap[gap["year"].isin(YEARS[:2])]
    p = ggplot(data=data, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point() + facet_grid("continent ~ year")
    resolved = resolve_plot(p)
    assert resolved.grid == (len(CONTINENTS), 2)
    assert resolved.row_col_labels(1) == ("Africa", str(YEARS[1]))


def test_more_than_six_shapes_is_an_error(gap):
    from gapviz.render.palettes import train_aesthetics

    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", shape="country")) + geom_point()
    with pytest.raises(RenderError, match="maximum of 6"):
        train_aesthetics(resolve_plot(p))


def test_continuous_shape_is_an_error(gap):
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", shape="pop")) + geom_point()
    with pytest.raises(RenderError, match="shape"):
        resolve_plot(p)


def test_discrete_axis_cannot_be_logged(gap):
    p = ggplot(data=gap, mapping=aes(x="continent", y="lifeExp")) + geom_boxplot() + scale_x_log10()
    with pytest.raises(RenderError):
        resolve_plot(p)


def test_resolving_never_mutates_the_dataset(gap):
    before = gap.copy()
    p = ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="continent")) + geom_point() + facet_wrap("continent")
    resolve_plot(p)
    pd.testing.assert_frame_equal(gap, before)


def test_free_discrete_axis_keeps_levels_per_panel(gap):
    p = ggplot(data=gap, mapping=aes(x="country", y="lifeExp")) + geom_boxplot() + facet_wrap("~ continent", scales="free")
    resolved = resolve_plot(p)
    assert len(resolved.x_levels) == len(CONTINENTS) * COUNTRIES_PER_CONTINENT
    for i in range(resolved.n_panels):
        continent = resolved.panel_label(i)
        assert resolved.levels_for("x", i) == [f"{continent}-{k + 1}" for k in range(COUNTRIES_PER_CONTINENT)]


def test_fixed_discrete_axis_shares_every_level(gap):
    p = ggplot(data=gap, mapping=aes(x="country", y="lifeExp")) + geom_boxplot() + facet_wrap("~ continent")
    resolved = resolve_plot(p)
    assert resolved.panel_levels == {}
    assert resolved.levels_for("x", 3) == resolved.x_levels


def test_constant_aesthetic_is_broadcast(gap):
    p = ggplot(data=gap, mapping=aes(x=1, y="lifeExp")) + geom_boxplot()
    frame = resolve_plot(p).layers[0].frame
    assert len(frame) == len(gap)
    assert (frame["x"] == 1).all()
