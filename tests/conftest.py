import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
import matplotlib.pyplot as plt
from gapviz.grammar import set_last_plot


CONTINENTS = ["Africa", "Americas", "Asia", "Europe", "Oceania"]
YEARS = list(range(1952, 2008, 5))
COUNTRIES_PER_CONTINENT = 3


def make_gapminder(seed: int = 7) -> pd.DataFrame:
    """Small gapminder-shaped table: 5 continents x 3 countries x 12 years."""
    rng = np.random.default_rng(seed)
    rows = []
    for ci, continent in enumerate(CONTINENTS):
        for k in range(COUNTRIES_PER_CONTINENT):
            country = f"{continent}-{k + 1}"
            gdp0 = 400.0 * (ci + 1) * (k + 1)
            pop0 = 1_000_000 * (k + 2)
            for j, year in enumerate(YEARS):
                rows.append({
                    "country": country,
                    "year": year,
                    "pop": float(pop0 * 1.02 ** j),
                    "continent": continent,
                    "lifeExp": round(38 + 6 * ci + 0.4 * j + rng.normal(0, 1.5), 3),
                    "gdpPercap": round(gdp0 * 1.04 ** j * rng.uniform(0.9, 1.1), 4),
                })
    return pd.DataFrame(rows, columns=["country", "year", "pop", "continent", "lifeExp", "gdpPercap"])


@pytest.fixture
def gap() -> pd.DataFrame:
    return make_gapminder()


@pytest.fixture
def gap_csv(tmp_path, gap):
    path = tmp_path / "gapminder_data.csv"
    gap.to_csv(path, index=False)
    return path


@pytest.fixture(autouse=True)
def _clean_state():
    set_last_plot(None)
    yield
    plt.close("all")
    set_last_plot(None)
