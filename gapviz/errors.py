"""
Exceptions raised by gapviz.

- DatasetParseError : malformed input table (loader)
- UnresolvedFieldError : aesthetic or facet refers to an unknown field (render time)
- RenderError : plot cannot be drawn, e.g. missing required channel (render time)
- ExportError : output file cannot be written (exporter)
"""


class DatasetParseError(ValueError):
    """Input file is not well-formed delimited text."""


class PlotError(Exception):
    """Base class for problems detected while resolving a plot against its data."""


class UnresolvedFieldError(PlotError):
    """A mapped field does not exist in the bound dataset."""

    def __init__(self, field: str, channel: str, available=()):
        self.field = field
        self.channel = channel
        self.available = tuple(available)
        msg = f"[ERROR] Unresolved field '{field}' mapped to '{channel}'"
        if self.available:
            msg += f" (available: {', '.join(map(str, self.available))})"
        super().__init__(msg)


class RenderError(PlotError):
    """The plot specification cannot be turned into a figure."""


class ExportError(OSError):
    """The rendered plot cannot be written to the requested path or format."""
