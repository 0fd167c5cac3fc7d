from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from farmviz.core.local_cache import THEME_KEY, LocalCache
from farmviz.core.models import PlantRecord


class View(str, Enum):
    UPLOAD = "upload"
    MAP = "map"
    DETAIL = "detail"


class Theme(str, Enum):
    LIGHT = "light"
    DARK = "dark"


def parse_theme(value: str | None) -> Theme:
    text = (value or "").strip().lower()
    try:
        return Theme(text)
    except ValueError:
        return Theme.LIGHT


@dataclass
class ViewState:
    """Which screen is shown, the selected plant, and the theme.

    Only the theme is persisted (to the cache key `theme`) on every change.
    """
    cache: LocalCache | None = None
    view: View = View.UPLOAD
    selected: PlantRecord | None = None
    theme: Theme = field(default=Theme.LIGHT)

    @classmethod
    def restore(cls, cache: LocalCache | None) -> "ViewState":
        theme = parse_theme(cache.get_item(THEME_KEY)) if cache is not None else Theme.LIGHT
        return cls(cache=cache, theme=theme)

    def set_view(self, view: View | str) -> View:
        self.view = View(view)
        return self.view

    def select(self, record: PlantRecord | None) -> None:
        self.selected = record

    def clear_selection(self) -> None:
        self.selected = None

    def show_detail(self, record: PlantRecord) -> None:
        self.select(record)
        self.set_view(View.DETAIL)

    def close_detail(self) -> None:
        self.clear_selection()
        self.set_view(View.MAP)

    @property
    def has_selection(self) -> bool:
        return self.selected is not None

    def set_theme(self, theme: Theme | str) -> Theme:
        self.theme = Theme(theme)
        if self.cache is not None:
            self.cache.set_item(THEME_KEY, self.theme.value)
        return self.theme

    def toggle_theme(self) -> Theme:
        return self.set_theme(Theme.DARK if self.theme == Theme.LIGHT else Theme.LIGHT)
