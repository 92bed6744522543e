# gapviz/interactive/__init__.py
"""
interactive figures
===================
- plotly_adapter : ggplotly (Plot -> plotly Figure), interactive_mappings, save_html
"""
from .plotly_adapter import ggplotly, interactive_mappings, save_html

__all__ = ["ggplotly", "interactive_mappings", "save_html"]
