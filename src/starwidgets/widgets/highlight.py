"""Syntax highlighted code block driven by Prism."""

import secrets
from typing import Any, Optional

from fasthtml.common import Code, Div, Pre

from ..config import get_config
from ..observable import as_observable
from ..scope import Scope
from ..theme import WidgetTheme, resolve_theme
from ..view import CurrentFragment, ViewHandle, js_literal
from ..widget import Widget, WidgetKind


def highlight(text: Any, *, language: str = "python", theme: Optional[WidgetTheme] = None) -> Widget:
    """
    ``language`` syntax highlighting for ``text``.

    ``text`` may be an Observable; writing to it re-highlights the block.
    Every render carries the current text, so pages mounting the widget
    later start from the present value.
    """
    theme = resolve_theme(theme)
    assets = get_config().assets
    value = as_observable(text)
    code_id = f"code{secrets.token_hex(8)}"

    scope = Scope(imports=[assets.prism_js, assets.prism_css])
    theme.apply(scope)
    scope.bind("value", value)
    scope.dom = CurrentFragment(
        lambda source: Div(Pre(Code(source, cls=f"language-{language}", id=code_id,
                                    **{"data-on-load": "Prism.highlightElement(el)"})),
                           cls=theme.content_cls),
        value,
    )

    def paint(view: ViewHandle, source: Any) -> None:
        view.run_js(
            f"(function () {{ var code = {view.element(code_id)}; "
            f"code.textContent = {js_literal(source)}; Prism.highlightElement(code); }})()"
        )

    scope.on_import(lambda view: paint(view, value.get()))
    scope.on_change("value", lambda source: paint(scope.view, source))

    return Widget(WidgetKind.HIGHLIGHT, {"value": value}, scope=scope)
