import numbers
from collections.abc import Mapping
from typing import Optional
import numpy as np


#########################################
##                PARAMS               ##
#########################################

POSITION_CHANNELS = ("x", "y")
VISUAL_CHANNELS = ("color", "fill", "shape", "size", "alpha", "linetype")
KNOWN_CHANNELS = POSITION_CHANNELS + VISUAL_CHANNELS + ("group",)

ALIASES = {
    "colour": "color",
    "col": "color",
    "pch": "shape",
    "cex": "size",
}

def normalize_channel(name: str) -> str:
    return ALIASES.get(name, name)


#########################################
##               MAPPING               ##
#########################################

class Aes(Mapping):
    """
    Immutable mapping from aesthetic channel to field name or constant.
    Strings name fields; numbers and booleans are constants repeated for
    every observation (aes(x=1, y="lifeExp") gives a single box).
    Channels outside KNOWN_CHANNELS are kept as extra aesthetics: they have
    no visual meaning in static plots but show up in interactive tooltips.
    """

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping] = None, **channels):
        merged = dict(items or {})
        merged.update(channels)
        resolved = {}
        for channel, field in merged.items():
            if field is None:
                continue
            if not isinstance(field, (str, numbers.Number, np.generic)):
                raise TypeError(
                    f"[ERROR] Aesthetic '{channel}' must be a field name or a scalar constant, got {type(field).__name__}"
                )
            resolved[normalize_channel(channel)] = field
        self._items = resolved

    def __getitem__(self, channel: str) -> str:
        return self._items[normalize_channel(channel)]

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._items.items())
        return f"aes({inner})"

    def merge(self, other: Optional[Mapping]) -> "Aes":
        """New mapping with `other` taking precedence channel by channel."""
        if not other:
            return self
        return Aes({**self._items, **dict(other)})

    @property
    def extra(self) -> dict:
        return {k: v for k, v in self._items.items() if k not in KNOWN_CHANNELS}

    @property
    def fields(self) -> set:
        return {v for v in self._items.values() if is_field(v)}

    @property
    def constants(self) -> dict:
        return {k: v for k, v in self._items.items() if not is_field(v)}


def is_field(value) -> bool:
    return isinstance(value, str)


def aes(x=None, y=None, **channels) -> Aes:
    """Map data fields (or constants) to visual channels, e.g. aes(x="gdpPercap", y="lifeExp", color="continent")."""
    return Aes(x=x, y=y, **channels)
