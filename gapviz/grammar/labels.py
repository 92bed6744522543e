from collections.abc import Mapping
from typing import Optional
from .aes import normalize_channel


class Labels(Mapping):
    """Immutable titles for the plot and its channels (x, y, color, shape, ...)."""

    __slots__ = ("_items",)

    def __init__(self, items: Optional[Mapping] = None):
        self._items = {normalize_channel(k): v for k, v in dict(items or {}).items() if v is not None}

    def __getitem__(self, key: str):
        return self._items[normalize_channel(key)]

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        inner = ", ".join(f"{k}={v!r}" for k, v in self._items.items())
        return f"labs({inner})"

    def merge(self, other: Mapping) -> "Labels":
        return Labels({**self._items, **dict(other)})


def labs(title: Optional[str] = None, subtitle: Optional[str] = None, caption: Optional[str] = None, x: Optional[str] = None, y: Optional[str] = None, **channels) -> Labels:
    return Labels(dict(title=title, subtitle=subtitle, caption=caption, x=x, y=y, **channels))

def xlab(label: str) -> Labels:
    return Labels({"x": label})

def ylab(label: str) -> Labels:
    return Labels({"y": label})

def ggtitle(label: str, subtitle: Optional[str] = None) -> Labels:
    return Labels({"title": label, "subtitle": subtitle})
