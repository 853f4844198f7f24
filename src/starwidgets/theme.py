"""
Widget Themes

A theme names the CSS classes the widget layouts use and the stylesheets a
scope must import to look right. Constructors take an explicit ``theme``;
when omitted they fall back to the default theme chosen at application start
(``config.theme`` or ``set_default_theme``).
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from monsterui.all import Theme as MonsterTheme

from .config import get_config
from .errors import WidgetConstructionError
from .resources import ResourceRef, resource_list


@dataclass(frozen=True)
class WidgetTheme:
    name: str
    resources: Tuple[ResourceRef, ...] = ()
    field_cls: str = "field"
    content_cls: str = "content"
    notification_cls: str = "notification"
    delete_cls: str = "delete"
    accordions_cls: str = "accordions"
    accordion_cls: str = "accordion"
    accordion_header_cls: str = "accordion-header toggle"
    accordion_body_cls: str = "accordion-body"
    accordion_content_cls: str = "accordion-content"
    active_cls: str = "is-active"
    page_headers: Optional[Callable[[], tuple]] = None

    def headers(self) -> tuple:
        """Page headers the host app adds once (``fast_app(hdrs=...)``)."""
        if self.page_headers is not None:
            return tuple(self.page_headers())
        return tuple(ref.__ft__() for ref in self.resources)

    def apply(self, scope) -> None:
        """Add the theme stylesheets to a scope's imports."""
        scope.add_imports(self.resources)


def merge_classes(*classes: Optional[str]) -> str:
    """Join CSS class strings, dropping empties and repeats."""
    seen = dict.fromkeys(c for cls in classes if cls for c in cls.split())
    return " ".join(seen)


BULMA = WidgetTheme(
    name="bulma",
    resources=resource_list([
        "https://cdn.jsdelivr.net/npm/bulma@0.9.4/css/bulma.min.css",
        "https://cdn.jsdelivr.net/npm/bulma-accordion@2.0.1/dist/css/bulma-accordion.min.css",
    ]),
)


def monsterui_theme(color: str = "zinc") -> WidgetTheme:
    """Theme built on MonsterUI (Franken UI) classes and headers."""
    try:
        monster = MonsterTheme[color]
    except KeyError:
        raise WidgetConstructionError(f"Unknown MonsterUI theme color: {color}") from None
    return WidgetTheme(
        name="monsterui",
        field_cls="uk-margin",
        content_cls="uk-card uk-card-body",
        notification_cls="uk-alert",
        delete_cls="uk-close",
        accordions_cls="uk-accordion",
        accordion_cls="",
        accordion_header_cls="uk-accordion-title",
        accordion_body_cls="uk-accordion-content",
        accordion_content_cls="",
        active_cls="uk-open",
        page_headers=monster.headers,
    )


_THEMES = {
    "bulma": lambda: BULMA,
    "monsterui": monsterui_theme,
}

_default_theme: Optional[WidgetTheme] = None


def get_theme(name: str) -> WidgetTheme:
    try:
        return _THEMES[name]()
    except KeyError:
        raise WidgetConstructionError(f"Unknown theme: {name}") from None


def get_default_theme() -> WidgetTheme:
    """Theme used by constructors called without ``theme=``."""
    if _default_theme is not None:
        return _default_theme
    return get_theme(get_config().theme)


def set_default_theme(theme: Optional[WidgetTheme]) -> None:
    """Override the configured default theme (``None`` restores it)."""
    global _default_theme
    _default_theme = theme


def resolve_theme(theme: Optional[WidgetTheme]) -> WidgetTheme:
    return theme if theme is not None else get_default_theme()
