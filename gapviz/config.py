"""
Runtime configuration for gapviz.

Defaults are module-level constants; a `.env` file at the project root and the
process environment may override paths and export resolution:
    GAPVIZ_DATA     : input csv (default: data/gapminder_data.csv)
    GAPVIZ_FIGURES  : output folder for saved figures (default: figures/)
    GAPVIZ_DPI      : default export resolution (default: 300)
"""

import os
from pathlib import Path
from dotenv import load_dotenv


#########################################
##                CONFIG               ##
#########################################

PROJECT_ROOT = Path(__file__).resolve().parents[1]

env_path = PROJECT_ROOT / ".env"
load_dotenv(env_path)

DATA_PATH = Path(os.getenv("GAPVIZ_DATA", PROJECT_ROOT / "data" / "gapminder_data.csv"))
FIGURES_DIR = Path(os.getenv("GAPVIZ_FIGURES", PROJECT_ROOT / "figures"))

try:
    DEFAULT_DPI = int(os.getenv("GAPVIZ_DPI", "300"))
except ValueError:
    raise EnvironmentError(f"[ERROR] GAPVIZ_DPI must be an integer, got {os.getenv('GAPVIZ_DPI')!r}")

# ggsave falls back to the size of the current graphics device
DEFAULT_WIDTH = 7.0
DEFAULT_HEIGHT = 7.0
DEFAULT_UNITS = "in"

# on-screen rendering
SCREEN_FIGSIZE = (7.0, 7.0)
SCREEN_DPI = 100
