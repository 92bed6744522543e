#!/usr/bin/env python3
"""
Walks through the gapminder visualization workshop, one section at a time:
- data        : load the table, print its head and structure
- intro       : scatter, line and trend-line examples
- publication : styled life expectancy plot saved as png/pdf
- facets      : small multiples by continent and by year
- combine     : labelled grid and free canvas layout of two plots
- interactive : faceted line plot converted to an interactive html page

A failing section is reported and the run continues with the next one.

Outputs:
    figures/life_expectancy.png  (7x7 in, then overwritten by 8x6 in @ 300 dpi)
    figures/life_expectancy.pdf
    figures/combined_plot.pdf    (10x4 in)
    figures/year_lifeexp_interactive.html

Usage:
    python -m gapviz.pipelines.run_workshop [-s] [--data PATH] [--figures DIR] [section ...] [| tee stdout_workshop.txt]
"""

import sys
from pathlib import Path
from typing import Optional, Sequence
import matplotlib.pyplot as plt
import pandas as pd
from gapviz import config
from gapviz.compose import draw_plot, ggdraw, plot_grid
from gapviz.data import check_dataset_schema, load_dataset, summarize_dataset
from gapviz.grammar import (
    aes,
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
    theme_cowplot,
    theme_minimal,
)
from gapviz.interactive import ggplotly, save_html
from gapviz.render import ggsave, render
from .time_utils import timeit


#########################################
##                PARAMS               ##
#########################################

SECTIONS = ("data", "intro", "publication", "facets", "combine", "interactive")

LIFEEXP_PNG = "life_expectancy.png"
LIFEEXP_PDF = "life_expectancy.pdf"
COMBINED_PDF = "combined_plot.pdf"
INTERACTIVE_HTML = "year_lifeexp_interactive.html"


#########################################
##               HELPER                ##
#########################################

def display(obj, show: bool = False):
    """Renders a plot or canvas; shows it on request, then releases the figure."""
    fig = render(obj)
    try:
        if show:
            plt.show()
    finally:
        plt.close(fig)

def header(title: str):
    print(f"\n==============================")
    print(f"  {title}")
    print(f"==============================")


#########################################
##               SECTIONS              ##
#########################################

@timeit
def gen_data(data_path: Path) -> pd.DataFrame:
    header(f"DATA ({data_path.name})")
    gap = load_dataset(data_path)
    check_dataset_schema(gap)
    print(summarize_dataset(gap))
    print(f"[OK] Loaded {len(gap)} rows x {gap.shape[1]} fields.")
    return gap

@timeit
def gen_intro(gap: pd.DataFrame, show: bool = False) -> list:
    header("INTRO TO THE PLOT GRAMMAR")
    plots = [
        # first plot
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp")) + geom_point(),

        # year vs life expectancy
        ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="continent")) + geom_point(),

        # one line per country
        ggplot(data=gap, mapping=aes(x="year", y="lifeExp", color="continent", group="country")) + geom_line(),

        # colour only on the line layer
        ggplot(data=gap, mapping=aes(x="year", y="lifeExp", group="country"))
        + geom_line(aes(color="continent"))
        + geom_point(),

        # fixed colour for points
        ggplot(data=gap, mapping=aes(x="year", y="lifeExp", group="country"))
        + geom_line(mapping=aes(color="continent"))
        + geom_point(color="blue"),

        # transparency, log x, linear trend
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp"))
        + geom_point(alpha=0.5)
        + scale_x_log10()
        + geom_smooth(method="lm", size=3),

        # shape per continent, one trend per continent
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp"))
        + geom_point(aes(color="continent", shape="continent"), size=2, alpha=0.5)
        + scale_x_log10()
        + geom_smooth(aes(group="continent"), method="lm"),
    ]
    for i, p in enumerate(plots, 1):
        display(p, show)
        print(f"[OK] Intro plot {i}/{len(plots)} rendered.")
    return plots

def lifeexp_plot(gap: pd.DataFrame):
    return (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp", color="continent"))
        + geom_point(mapping=aes(shape="continent"), size=2)
        + scale_x_log10()
        + geom_smooth(method="lm")
        + scale_y_continuous(limits=(0, 100), breaks=seq(0, 100, by=10))
        + theme_minimal()
        + labs(
            title="Effects of per-capita GDP",
            x="GDP per Capita ($)",
            y="Life Expectancy (yrs)",
            color="Continents",
            shape="Continents",
        )
    )

@timeit
def gen_publication(gap: pd.DataFrame, figures_dir: Path, show: bool = False) -> list:
    header("PUBLICATION FIGURE")
    p = lifeexp_plot(gap)
    display(p, show)

    saved = [
        ggsave(figures_dir / LIFEEXP_PNG, plot=p),
        ggsave(figures_dir / LIFEEXP_PDF, plot=p),
        ggsave(figures_dir / LIFEEXP_PNG, plot=p, width=8, height=6, units="in", dpi=300),
    ]
    for path in saved:
        print(f"[OK] Saved {path}")
    return saved

@timeit
def gen_facets(gap: pd.DataFrame, show: bool = False) -> list:
    header("FACETS")
    by_continent = (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp"))
        + facet_wrap("~ continent", ncol=2, scales="free")
        + geom_point(alpha=0.5)
        + scale_x_log10()
        + geom_smooth(method="lm")
    )
    by_year = (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp", color="continent"))
        + facet_wrap("~ year")
        + geom_point(alpha=0.5)
        + scale_x_log10()
        + geom_smooth(method="lm")
    )
    for name, p in (("continent", by_continent), ("year", by_year)):
        display(p, show)
        print(f"[OK] Faceted by {name}.")
    return [by_continent, by_year]

@timeit
def gen_combine(gap: pd.DataFrame, figures_dir: Path, show: bool = False) -> dict:
    header("COMBINING PLOTS")
    plot_a = (
        ggplot(data=gap, mapping=aes(x="gdpPercap", y="lifeExp"))
        + geom_point()
        + scale_x_log10()
        + theme_cowplot()
    )
    plot_b = (
        ggplot(data=gap, mapping=aes(x="continent", y="lifeExp"))
        + geom_boxplot()
        + theme_cowplot()
    )
    display(plot_a, show)
    display(plot_b, show)

    grid = plot_grid(plot_a, plot_b, labels=["A", "B"])
    display(grid, show)

    # saves the last plot built, i.e. the grid
    path = ggsave(figures_dir / COMBINED_PDF, width=10, height=4, units="in")
    print(f"[OK] Saved {path}")

    canvas = (
        ggdraw()
        + draw_plot(plot_a, x=0, y=0, width=0.3, height=1)
        + draw_plot(plot_b, x=0.3, y=0, width=0.7, height=1)
    )
    display(canvas, show)
    overlaps = canvas.overlapping_pairs()
    if overlaps:
        print(f"[WARN] Overlapping placements on canvas: {overlaps}")
    else:
        print(f"[OK] Canvas with {len(canvas)} non-overlapping placements rendered.")

    return {"plot_a": plot_a, "plot_b": plot_b, "grid": grid, "canvas": canvas, "path": path}

@timeit
def gen_interactive(gap: pd.DataFrame, figures_dir: Path, show: bool = False) -> Path:
    header("INTERACTIVE FIGURE")
    year_lifeexp = (
        ggplot(data=gap, mapping=aes(x="year", y="lifeExp", continent="continent"))
        + facet_wrap("~ continent")
        + geom_line(aes(group="country"))
        + scale_x_log10()
    )
    display(year_lifeexp, show)

    fig = ggplotly(year_lifeexp)
    path = save_html(fig, figures_dir / INTERACTIVE_HTML)
    print(f"[OK] Saved {path} ({len(fig.data)} traces)")
    if show:
        fig.show()
    return path


#########################################
##                 RUN                 ##
#########################################

def run_workshop(
        sections: Optional[Sequence[str]] = None,
        data_path: Optional[Path] = None,
        figures_dir: Optional[Path] = None,
        show: bool = False,
    ) -> dict:
    """
    Runs the requested sections in workshop order.
    Returns {section: None | error message}.
    """
    sections = [s for s in SECTIONS if s in set(sections or SECTIONS)]
    data_path = Path(data_path or config.DATA_PATH)
    figures_dir = Path(figures_dir or config.FIGURES_DIR)
    figures_dir.mkdir(parents=True, exist_ok=True)

    print(f"[INFO] Data    : {data_path}")
    print(f"[INFO] Figures : {figures_dir}")
    print(f"[INFO] Sections: {', '.join(sections)}")

    gap = None
    status = {}
    for section in sections:
        try:
            if gap is None:
                gap = gen_data(data_path)
            if section == "intro":
                gen_intro(gap, show)
            elif section == "publication":
                gen_publication(gap, figures_dir, show)
            elif section == "facets":
                gen_facets(gap, show)
            elif section == "combine":
                gen_combine(gap, figures_dir, show)
            elif section == "interactive":
                gen_interactive(gap, figures_dir, show)
            status[section] = None
        except Exception as e:
            print(f"[ERROR] {section}: {e}")
            status[section] = str(e)
        finally:
            plt.close("all")

    failed = [s for s, err in status.items() if err is not None]
    if failed:
        print(f"\n[DONE] {len(sections) - len(failed)}/{len(sections)} sections succeeded; failed: {', '.join(failed)}")
    else:
        print(f"\n[DONE] All {len(sections)} sections succeeded.")
    return status

def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse

    parser = argparse.ArgumentParser(
        description="Run the gapminder visualization workshop, all sections or a selection."
    )

    parser.add_argument(
        "-s", "--show",
        action="store_true",
        help="display every figure (blocks until the window is closed)"
    )

    parser.add_argument(
        "--data",
        type=Path,
        default=config.DATA_PATH,
        help=f"gapminder csv file [default: {config.DATA_PATH}]"
    )

    parser.add_argument(
        "--figures",
        type=Path,
        default=config.FIGURES_DIR,
        help=f"output folder for saved figures [default: {config.FIGURES_DIR}]"
    )

    parser.add_argument(
        "sections",
        nargs="*",
        metavar="section",
        help=f"one or more of {', '.join(SECTIONS)} [default: all]"
    )

    args = parser.parse_args(argv)

    unknown = [s for s in args.sections if s not in SECTIONS]
    if unknown:
        parser.error(f"unknown section(s) {', '.join(unknown)}; choose from {', '.join(SECTIONS)}")

    status = run_workshop(args.sections, args.data, args.figures, args.show)
    return 1 if any(err is not None for err in status.values()) else 0


if __name__ == "__main__":
    sys.exit(main())
