"""LaTeX rendering through KaTeX."""

from typing import Any, Optional

from fasthtml.common import Div

from ..config import get_config
from ..observable import as_observable
from ..scope import Scope
from ..theme import WidgetTheme, resolve_theme
from ..view import CurrentFragment, ViewHandle, js_literal
from ..widget import Widget, WidgetKind


def latex(text: Any, *, theme: Optional[WidgetTheme] = None) -> Widget:
    """
    Render ``text`` with KaTeX.

    Backslashes need escaping in ordinary Python strings:
    ``latex("\\\\sum_{i=1}^{\\\\infty} e^i")`` or ``latex(r"\\sum_{i=1}^{\\infty} e^i")``.
    """
    theme = resolve_theme(theme)
    assets = get_config().assets
    value = as_observable(text)

    scope = Scope(imports=[assets.katex_js, assets.katex_css])
    container_id = f"{scope.id}-container"
    scope.bind("value", value)
    # the source travels as text content and is typeset in place on load
    scope.dom = CurrentFragment(
        lambda source: Div(source, id=container_id, **{"data-on-load": "katex.render(el.textContent, el)"}),
        value,
    )

    def typeset(view: ViewHandle, source: Any) -> None:
        view.run_js(f"katex.render({js_literal(source)}, {view.element(container_id)})")

    scope.on_import(lambda view: typeset(view, value.get()))
    scope.on_change("value", lambda source: typeset(scope.view, source))

    return Widget(WidgetKind.LATEX, {"value": value}, scope=scope,
                  layout=lambda w: Div(w.scope, cls=theme.field_cls))
