"""
Accordion

Collapsible sections built from an ordered sequence of ``(label, content)``
pairs. With ``multiple=True`` any number of sections can be open and the
index is a tuple of open positions; with ``multiple=False`` exactly one
section is open and the index is its position. Positions are 0-based.

Replacing the options resets the index to the ``default`` for the new
options (nothing open, or the first section; ``None`` when single mode has
no options). Positions outside the options are rejected.
"""

from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple, Union

from fasthtml.common import Article, Div, NotStr, P, Section
from pydantic import BaseModel

from ..binding import bind_template
from ..errors import PayloadError, WidgetConstructionError
from ..observable import Observable, as_observable, lift
from ..scope import Scope
from ..theme import WidgetTheme, resolve_theme
from ..view import render_markup
from ..widget import Widget, WidgetKind


class AccordionOption(BaseModel):
    """One pre-rendered accordion entry as sent to the page."""
    label: str
    i: int
    content: str


def _position(i: Any, count: int) -> int:
    if isinstance(i, bool):
        raise TypeError(f"Accordion position must be an integer, got {i!r}")
    i = int(i)
    if not 0 <= i < count:
        raise ValueError(f"Accordion position {i} out of range for {count} options")
    return i


class SingleSelection:
    """Exactly one open position, or None when there are no options."""
    multiple = False

    def initial(self, options: Any) -> Optional[int]:
        return 0 if option_pairs(options) else None

    def normalize(self, index: Any, count: int) -> Optional[int]:
        if index is None and count == 0:
            return None
        return _position(index, count)

    def toggle(self, index: Optional[int], i: int) -> int:
        return i

    def is_active(self, index: Optional[int], i: int) -> bool:
        return index == i

    def active_js(self, signal: str, i: int) -> str:
        return f"{signal} == {i}"


class MultiSelection:
    """Any set of open positions, kept in the order they were opened."""
    multiple = True

    def initial(self, options: Any) -> Tuple[int, ...]:
        return ()

    def normalize(self, index: Any, count: int) -> Tuple[int, ...]:
        if index is None:
            return ()
        if isinstance(index, (int, str)):
            index = [index]
        return tuple(dict.fromkeys(_position(i, count) for i in index))

    def toggle(self, index: Tuple[int, ...], i: int) -> Tuple[int, ...]:
        if i in index:
            return tuple(j for j in index if j != i)
        return (*index, i)

    def is_active(self, index: Tuple[int, ...], i: int) -> bool:
        return i in index

    def active_js(self, signal: str, i: int) -> str:
        return f"{signal}.includes({i})"


Selection = Union[SingleSelection, MultiSelection]


def option_pairs(options: Any) -> List[Tuple[Any, Any]]:
    """Validate options as ``(label, content)`` pairs, in order."""
    if isinstance(options, Mapping):
        return list(options.items())
    if isinstance(options, (str, bytes)) or not isinstance(options, Sequence):
        raise WidgetConstructionError("Accordion options must be a mapping or a sequence of (label, content) pairs")
    pairs = []
    for n, entry in enumerate(options):
        if not isinstance(entry, (tuple, list)) or len(entry) != 2:
            raise WidgetConstructionError(f"Accordion option {n} is not a (label, content) pair: {entry!r}")
        pairs.append((entry[0], entry[1]))
    return pairs


def render_options(options: Any) -> List[dict]:
    return [AccordionOption(label=str(label), i=i, content=render_markup(content)).model_dump()
            for i, (label, content) in enumerate(option_pairs(options))]


class Accordion(Widget):
    """Accordion widget; ``select(i)`` acts like a click on section ``i``."""

    def __init__(self, options: Any, *, multiple: bool = True, default: Optional[Observable] = None,
                 value: Any = None, index: Any = None, theme: Optional[WidgetTheme] = None):
        self.theme = resolve_theme(theme)
        self.selection: Selection = MultiSelection() if multiple else SingleSelection()
        options = as_observable(options)
        count = len(option_pairs(options.get()))

        if default is None:
            default = lift(self.selection.initial, options)
        if index is None:
            index = default.get() if value is None else value
        try:
            if isinstance(index, Observable):
                index.set(self.selection.normalize(index.get(), count))
            else:
                index = Observable(self.selection.normalize(index, count))
        except (TypeError, ValueError) as e:
            raise WidgetConstructionError(f"Invalid accordion index: {e}") from e
        default.subscribe(lambda new_default: index.set(self._normalize(new_default)))

        records = lift(render_options, options)
        scope = bind_template(self._template, {"index": index, "options_js": records},
                              methods={"on_click": self._on_click},
                              writable={"index": self._normalize})
        self.theme.apply(scope)
        super().__init__(WidgetKind.ACCORDION, {"index": index, "options": options}, scope=scope,
                         output=index, updater=self._set_options)

    @property
    def multiple(self) -> bool:
        return self.selection.multiple

    @property
    def option_count(self) -> int:
        return len(option_pairs(self["options"].get()))

    def _normalize(self, index: Any):
        return self.selection.normalize(index, self.option_count)

    def select(self, i: int) -> None:
        """Toggle section ``i`` (multiple mode) or make it the open one."""
        i = _position(i, self.option_count)
        index = self["index"]
        index.set(self.selection.toggle(index.get(), i))

    def _on_click(self, i: Any) -> None:
        try:
            i = _position(i, self.option_count)
        except (TypeError, ValueError) as e:
            raise PayloadError(str(e)) from e
        self.select(i)

    def is_active(self, i: int) -> bool:
        return self.selection.is_active(self["index"].get(), i)

    def _set_options(self, options: Any) -> None:
        option_pairs(options)
        self["options"].set(options)

    def _template(self, scope: Scope) -> Observable:
        theme = self.theme
        signal = scope.signal("index")

        def article(record: dict):
            i = record["i"]
            return Article(
                Div(P(record["label"]), cls=theme.accordion_header_cls,
                    **{"data-on-click": scope.action("on_click", i=i)}),
                Div(Div(NotStr(record["content"]), cls=theme.accordion_content_cls), cls=theme.accordion_body_cls),
                cls=theme.accordion_cls,
                **{"data-class": f"{{'{theme.active_cls}': {self.selection.active_js(signal, i)}}}"},
            )

        return lift(lambda records: Section(*[article(r) for r in records], cls=theme.accordions_cls),
                    scope["options_js"])


def accordion(options: Any, *, multiple: bool = True, default: Optional[Observable] = None,
              value: Any = None, index: Any = None, theme: Optional[WidgetTheme] = None) -> Accordion:
    """
    Accordion over ``options`` (an Observable, a mapping, or ``(label, content)`` pairs).

    ``index`` (or its initial ``value``) is the open position(s); ``default``
    is an Observable derived from the options whose every new value is
    forwarded into ``index``.
    """
    return Accordion(options, multiple=multiple, default=default, value=value, index=index, theme=theme)
