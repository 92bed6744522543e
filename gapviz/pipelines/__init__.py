# gapviz/pipelines/__init__.py
"""
pipelines
=========
- run_workshop : reproduces the gapminder workshop examples section by section
- time_utils : timeit decorator for section timings
"""
from .time_utils import timeit

__all__ = ["timeit"]
