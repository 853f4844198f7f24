"""
Declarative two-way binding

``bind_template`` builds a scope whose observables are mirrored to the page
as Datastar signals and whose handlers are reachable from ``data-on-*``
attributes. The template is a function of the scope, so it can reference
``scope.signal(name)`` and ``scope.action(method, ...)``; it may return an
Observable of fragments to re-render when its inputs change.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from .observable import as_observable
from .scope import Scope


def bind_template(
    template: Callable[[Scope], Any],
    observables: Mapping[str, Any],
    methods: Optional[Dict[str, Callable[..., Any]]] = None,
    imports=(),
    writable: Optional[Mapping[str, Any]] = None,
) -> Scope:
    """
    Create a scope binding ``observables`` and ``methods`` to ``template``.

    Args:
        template: Called once with the new scope; returns the DOM fragment
            (or an Observable of fragments) using the scope's signals and actions.
        observables: Name to value mapping; every entry is exposed as a signal
            and must stay JSON-serializable.
        methods: Name to handler mapping callable from the page.
        imports: Resources the template needs.
        writable: Names the page may write through the ``set`` route, mapped
            to ``True`` or to a function converting the incoming value.
    """
    scope = Scope(imports=imports)
    writable = writable or {}
    for name, obs in observables.items():
        scope.bind(name, as_observable(obs), expose=True, writable=writable.get(name, False))
    for name, handler in (methods or {}).items():
        scope.method(name, handler)
    scope.dom = template(scope)
    return scope
