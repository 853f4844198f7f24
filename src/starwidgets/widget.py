"""
Widget - state, scope, output and layout

A widget pairs a scope with a named state mapping, designates one of the
state observables as its ``output`` and renders through a layout function.
It can also be used as a command: ``update`` pushes new values into its
state and ``trigger`` re-runs the change hooks of its primary observable
with the value it already holds.
"""

from enum import Enum
from typing import Any, Callable, Dict, Optional

from fasthtml.common import Div

from .errors import BindingError, UnknownWidgetKindError, WidgetConstructionError
from .observable import Observable
from .scope import Scope, scope_of


class WidgetKind(str, Enum):
    ALERT = "alert"
    CONFIRM = "confirm"
    HIGHLIGHT = "highlight"
    LATEX = "latex"
    NOTIFICATIONS = "notifications"
    ACCORDION = "accordion"

    @classmethod
    def coerce(cls, kind: Any) -> 'WidgetKind':
        try:
            return cls(kind)
        except ValueError:
            raise UnknownWidgetKindError(f"Unknown widget kind: {kind!r}") from None


def scope_layout(widget: 'Widget'):
    return scope_of(widget)


def hidden_layout(widget: 'Widget'):
    """Keep the scope on the page without showing it (dialog widgets)."""
    return Div(scope_of(widget), style="display: none")


class Widget:
    """
    Reusable UI unit.

    Args:
        kind: Member (or value) of WidgetKind.
        state: Name to Observable or plain value (e.g. a callback).
        scope: Scope wiring the observables to the view.
        output: Externally observed state entry; defaults to ``state["value"]``
            and must be one of the state values.
        layout: ``layout(widget)`` returns the renderable node.
        primary: State entry re-set by ``trigger`` and set by the default
            ``update``; defaults to the output entry.
        updater: Variant-specific ``update`` implementation.
    """

    def __init__(
        self,
        kind: Any,
        state: Optional[Dict[str, Any]] = None,
        *,
        scope: Scope,
        output: Optional[Observable] = None,
        layout: Optional[Callable[['Widget'], Any]] = None,
        primary: Optional[str] = None,
        updater: Optional[Callable[..., None]] = None,
    ):
        self.kind = WidgetKind.coerce(kind)
        self.state: Dict[str, Any] = dict(state or {})
        self.scope = scope

        if output is None:
            if "value" not in self.state:
                raise WidgetConstructionError(f"{self.kind.value} widget needs an output or a 'value' entry")
            output = self.state["value"]
        if not isinstance(output, Observable):
            raise WidgetConstructionError("Widget output must be an Observable")
        names = [name for name, entry in self.state.items() if entry is output]
        if not names:
            raise WidgetConstructionError("Widget output must be one of its state entries")
        self.output = output

        self.primary = primary or names[0]
        if not isinstance(self.state.get(self.primary), Observable):
            raise WidgetConstructionError(f"Primary entry {self.primary!r} must be an Observable")

        self.layout = layout or scope_layout
        self._updater = updater

    def __repr__(self) -> str:
        return f"Widget({self.kind.value!r}, state={list(self.state)}, scope={self.scope.id!r})"

    def __getitem__(self, name: str) -> Any:
        try:
            return self.state[name]
        except KeyError:
            raise BindingError(f"{self.kind.value} widget has no state entry {name!r}") from None

    def __setitem__(self, name: str, value: Any) -> None:
        if self.state.get(name) is self.output and value is not self.output:
            raise BindingError(f"Cannot replace the output entry {name!r}")
        self.state[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.state

    def observe(self) -> Observable:
        return self.output

    def render(self):
        return self.layout(self)

    def __ft__(self):
        node = self.render()
        return node.__ft__() if hasattr(node, '__ft__') else node

    def update(self, *args: Any, **kwargs: Any) -> None:
        """State-setting call: push a new payload into the widget state."""
        if self._updater is not None:
            self._updater(*args, **kwargs)
            return
        if len(args) != 1 or kwargs:
            raise TypeError(f"{self.kind.value} widget update takes exactly one value")
        self.state[self.primary].set(args[0])

    def trigger(self) -> None:
        """Re-run the primary change hooks with the current value."""
        self.state[self.primary].notify()

    def invoke(self, *args: Any, **kwargs: Any) -> None:
        """``trigger`` without payload, ``update`` otherwise."""
        if not args and not kwargs:
            self.trigger()
        else:
            self.update(*args, **kwargs)

    def close(self) -> None:
        self.scope.close()
