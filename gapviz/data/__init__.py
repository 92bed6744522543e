# gapviz/data/__init__.py
"""
data loading package
====================
this package provides utilities for reading tabular datasets from disk.
- io_utils : input helper for loading, validating and summarizing delimited text
"""
from .io_utils import GAPMINDER_FIELDS, load_dataset, check_dataset_schema, summarize_dataset

__all__ = ["GAPMINDER_FIELDS", "load_dataset", "check_dataset_schema", "summarize_dataset"]
