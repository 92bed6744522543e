from dataclasses import dataclass, field, replace
from functools import reduce
from types import MappingProxyType
from typing import Optional, Mapping
import pandas as pd
from .aes import Aes
from .layers import Layer
from .scales import ContinuousScale
from .facets import Facet
from .themes import Theme, theme_gray
from .labels import Labels


#########################################
##              LAST PLOT              ##
#########################################

_last = {"plot": None}

def set_last_plot(obj):
    """Record the most recently built plot or composite; ggsave falls back to it."""
    _last["plot"] = obj
    return obj

def last_plot():
    return _last["plot"]


#########################################
##                 PLOT                ##
#########################################

@dataclass(frozen=True, eq=False)
class Plot:
    """
    Declarative plot specification. Nothing is drawn until the plot is handed
    to the renderer, exporter or interactivity adapter, and field references
    are only checked then. `plot + component` returns a new Plot.
    """
    data: Optional[pd.DataFrame] = None
    mapping: Aes = field(default_factory=Aes)
    layers: tuple = ()
    scales: Mapping = field(default_factory=dict)
    facet: Optional[Facet] = None
    theme: Theme = field(default_factory=theme_gray)
    labels: Labels = field(default_factory=Labels)

    def __post_init__(self):
        object.__setattr__(self, "scales", MappingProxyType(dict(self.scales)))

    def _extend(self, component) -> "Plot":
        if isinstance(component, Layer):
            return replace(self, layers=self.layers + (component,))
        if isinstance(component, ContinuousScale):
            return replace(self, scales={**self.scales, component.aesthetic: component})
        if isinstance(component, Facet):
            return replace(self, facet=component)
        if isinstance(component, Theme):
            return replace(self, theme=self.theme + component)
        if isinstance(component, Labels):
            return replace(self, labels=self.labels.merge(component))
        if isinstance(component, Aes):
            return replace(self, mapping=self.mapping.merge(component))
        raise TypeError(f"[ERROR] Cannot add {type(component).__name__} to a plot")

    def __add__(self, other) -> "Plot":
        if isinstance(other, (list, tuple)):
            new = reduce(Plot._extend, other, self)
        else:
            new = self._extend(other)
        return set_last_plot(new)

    def scale_for(self, aesthetic: str) -> ContinuousScale:
        return self.scales.get(aesthetic, ContinuousScale(aesthetic))

    def label_for(self, channel: str, default: Optional[str] = None) -> Optional[str]:
        """Explicit label (labs/scale name) or the mapped field name."""
        if channel in ("x", "y"):
            scale = self.scales.get(channel)
            if scale is not None and scale.name is not None:
                return scale.name
        if channel in self.labels:
            return self.labels[channel]
        if channel in self.mapping:
            return str(self.mapping[channel])
        for layer in self.layers:
            if channel in layer.mapping:
                return str(layer.mapping[channel])
        return default

    def __repr__(self) -> str:
        shape = None if self.data is None else self.data.shape
        return (
            f"Plot(data={shape}, mapping={self.mapping!r}, layers={len(self.layers)}, "
            f"scales={sorted(self.scales)}, facet={self.facet}, theme={self.theme.name})"
        )


def ggplot(data: Optional[pd.DataFrame] = None, mapping: Optional[Aes] = None) -> Plot:
    """Base specification: a dataset plus default aesthetics for every layer."""
    if mapping is not None and not isinstance(mapping, Aes):
        mapping = Aes(mapping)
    return set_last_plot(Plot(data=data, mapping=mapping or Aes()))
