"""
Scope - binding between observables and a rendered DOM fragment

A scope owns a DOM fragment, the observables bound to it and two kinds of
hooks:

- the import hook runs once, when the scope is first attached to a page,
  and initializes the view from the *current* values of its observables;
- change hooks run on every write to a bound observable once the scope is
  attached, pushing the new value into the view.

Hooks do not touch the browser directly, they queue commands on
``scope.view`` which the routes stream to the page.
"""

import inspect
import logging
import re
import threading
import urllib.parse
from typing import Any, Callable, Dict, List, Optional, Union
from uuid import uuid4

from fasthtml.common import Div, Script

from .config import get_config
from .errors import BindingError, PayloadError, WidgetConstructionError
from .observable import Observable, Subscription, as_observable
from .registry import ScopeRepo
from .resources import resource_list
from .view import ViewHandle, js_literal

logger = logging.getLogger(__name__)

_SCOPE_ID = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class Scope:
    """Observables, hooks and view-callable methods of one DOM region."""

    def __init__(self, imports=(), dom: Any = None, id: Optional[str] = None):
        if id is not None and not _SCOPE_ID.match(id):
            raise WidgetConstructionError(f"Scope id {id!r} is not a valid signal namespace")
        self.id = id or f"scope_{uuid4().hex[:16]}"
        self.imports = resource_list(imports)
        self.observables: Dict[str, Observable] = {}
        self.methods: Dict[str, Callable[..., Any]] = {}
        self.exposed: List[str] = []
        self.writable: Dict[str, Optional[Callable[[Any], Any]]] = {}
        self.view = ViewHandle(self.id, backlog=get_config().view_backlog)

        self._on_import: Optional[Callable[[ViewHandle], None]] = None
        self._on_change: Dict[str, List[Callable[[Any], None]]] = {}
        self._subscriptions: List[Subscription] = []
        self._import_started = False
        self._attached = False
        self._closed = False
        self._lock = threading.RLock()
        self._dom: Any = None
        self._dom_subscription: Optional[Subscription] = None
        self.dom = dom

        ScopeRepo().register(self, ttl=get_config().scope_ttl)

    def __repr__(self) -> str:
        return f"Scope({self.id!r}, bound={list(self.observables)})"

    # Binding ------------------------------------------------------------

    def bind(self, name: str, obs: Any, expose: bool = False,
             writable: Union[bool, Callable[[Any], Any]] = False) -> Observable:
        """
        Bind ``obs`` under ``name``; plain values are wrapped in an Observable.

        Exposed observables are mirrored to the page as Datastar signals
        under the scope namespace. Only writable observables accept writes
        from the page (``receive``); a callable ``writable`` converts and
        validates the incoming value, raising ValueError or TypeError to
        reject it.
        """
        with self._lock:
            if name in self.observables:
                raise BindingError(f"{name!r} is already bound in scope {self.id}")
            obs = as_observable(obs)
            self.observables[name] = obs
            if expose:
                self.exposed.append(name)
            if writable:
                self.writable[name] = writable if callable(writable) else None
            self._subscriptions.append(obs.subscribe(lambda value, name=name: self._dispatch(name, value)))
        logger.debug(f"Bound {name!r} in scope {self.id}")
        return obs

    def __setitem__(self, name: str, obs: Any) -> None:
        self.bind(name, obs)

    def __getitem__(self, name: str) -> Observable:
        try:
            return self.observables[name]
        except KeyError:
            raise BindingError(f"Nothing is bound to {name!r} in scope {self.id}") from None

    def __contains__(self, name: str) -> bool:
        return name in self.observables

    def add_imports(self, imports) -> None:
        self.imports = resource_list([*self.imports, *resource_list(imports)])

    # Hooks ----------------------------------------------------------------

    def on_import(self, hook: Optional[Callable[[ViewHandle], None]] = None):
        """Register the one-time initialization hook; usable as a decorator."""
        def register(hook):
            if self._on_import is not None:
                raise BindingError(f"Scope {self.id} already has an import hook")
            self._on_import = hook
            return hook
        return register if hook is None else register(hook)

    def on_change(self, name: str, hook: Optional[Callable[[Any], None]] = None):
        """Register ``hook(value)`` for every write to the observable bound to ``name``."""
        def register(hook):
            self[name]
            self._on_change.setdefault(name, []).append(hook)
            return hook
        return register if hook is None else register(hook)

    def method(self, name: str, handler: Optional[Callable[..., Any]] = None):
        """Register a handler the page can call through the ``call`` route."""
        def register(handler):
            if name in self.methods:
                raise BindingError(f"Method {name!r} is already registered in scope {self.id}")
            self.methods[name] = handler
            return handler
        return register if handler is None else register(handler)

    # Lifecycle ------------------------------------------------------------

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> bool:
        """
        Run the import hook, once per scope.

        Returns ``True`` for the call that attached the scope, ``False`` for
        every later call.
        """
        with self._lock:
            if self._import_started:
                return False
            self._import_started = True
            if self._on_import is not None:
                self._on_import(self.view)
            self._attached = True
        logger.debug(f"Attached scope {self.id}")
        return True

    def close(self) -> None:
        """Detach from the bound observables and unregister the scope."""
        with self._lock:
            self._closed = True
            for subscription in self._subscriptions:
                subscription.cancel()
            self._subscriptions.clear()
            if self._dom_subscription is not None:
                self._dom_subscription.cancel()
                self._dom_subscription = None
        ScopeRepo().remove(self.id)
        logger.debug(f"Closed scope {self.id}")

    def _dispatch(self, name: str, value: Any) -> None:
        with self._lock:
            attached = self._attached
        if not attached:
            logger.debug(f"Scope {self.id} not attached yet, {name!r} change left to the import hook")
            return
        for hook in list(self._on_change.get(name, ())):
            hook(value)
        if name in self.exposed:
            self.view.merge_signals({self.id: {name: value}})

    # View events ------------------------------------------------------------

    def receive(self, name: str, value: Any) -> None:
        """Apply a write coming from the page to the writable observable bound to ``name``."""
        obs = self[name]
        if name not in self.writable:
            raise BindingError(f"{name!r} is not writable from the view in scope {self.id}")
        convert = self.writable[name]
        if convert is not None:
            try:
                value = convert(value)
            except (TypeError, ValueError) as e:
                raise PayloadError(f"Invalid value for {name!r}: {e}") from e
        logger.debug(f"Scope {self.id} received {name!r} from view")
        obs.set(value)

    def call(self, name: str, **kwargs: Any) -> Any:
        """
        Run the method registered under ``name``.

        Keyword arguments the handler does not accept are dropped; missing
        ones raise PayloadError.
        """
        try:
            handler = self.methods[name]
        except KeyError:
            raise BindingError(f"No method {name!r} in scope {self.id}") from None
        sig = inspect.signature(handler)
        if not any(p.kind == p.VAR_KEYWORD for p in sig.parameters.values()):
            kwargs = {k: v for k, v in kwargs.items() if k in sig.parameters}
        try:
            sig.bind(**kwargs)
        except TypeError as e:
            raise PayloadError(f"Bad arguments for {name!r}: {e}") from e
        return handler(**kwargs)

    # DOM ------------------------------------------------------------------

    @property
    def dom(self) -> Any:
        if isinstance(self._dom, Observable):
            return self._dom.get()
        return self._dom

    @dom.setter
    def dom(self, value: Any) -> None:
        with self._lock:
            if self._dom_subscription is not None:
                self._dom_subscription.cancel()
                self._dom_subscription = None
            self._dom = value
            if isinstance(value, Observable):
                self._dom_subscription = value.subscribe(self._push_dom)

    @property
    def content_id(self) -> str:
        return f"{self.id}-content"

    def _content(self, fragment: Any):
        children = () if fragment is None else (fragment,)
        return Div(*children, id=self.content_id)

    def _push_dom(self, fragment: Any) -> None:
        if not self._attached:
            return
        self.view.merge_fragment(self._content(fragment), selector=f"#{self.content_id}")

    # URLs and signals -----------------------------------------------------

    @property
    def base_url(self) -> str:
        return f"{get_config().route_prefix}/{self.id}"

    @property
    def live_url(self) -> str:
        return f"{self.base_url}/live"

    def set_url(self, name: str) -> str:
        return f"{self.base_url}/set/{name}"

    def action(self, method: str, **params: Any) -> str:
        """Datastar action string invoking ``method`` with ``params``."""
        path = f"{self.base_url}/call/{method}"
        if params:
            return f"@post('{path}?{urllib.parse.urlencode(params, doseq=True)}')"
        return f"@post('{path}')"

    def post_value_js(self, name: str, expression: str) -> str:
        """JavaScript statement sending ``expression`` to the ``set`` route of ``name``."""
        return (f"fetch({js_literal(self.set_url(name))}, {{method: 'POST', "
                f"headers: {{'Content-Type': 'application/json'}}, "
                f"body: JSON.stringify({{value: {expression}}})}})")

    def signal(self, name: str) -> str:
        return f"${self.id}.{name}"

    def signals(self) -> Dict[str, Dict[str, Any]]:
        return {self.id: {name: self.observables[name].get() for name in self.exposed}}

    def __ft__(self):
        if not self._closed:
            # rendering keeps the scope reachable for the routes
            ScopeRepo().register(self, ttl=get_config().scope_ttl)
        self.attach()
        children = [ref.__ft__() for ref in self.imports]
        children.append(self._content(self.dom))
        scripts = self.view.scripts()
        if scripts:
            children.append(Script(";\n".join(scripts)))
        attrs = {"data-on-load": f"@get('{self.live_url}')"}
        if self.exposed:
            attrs["data-signals"] = js_literal(self.signals())
        return Div(attrs, *children, id=self.id)


def scope_of(widget_or_scope: Any) -> 'Scope':
    """Return the scope of a widget (or the scope itself)."""
    return getattr(widget_or_scope, 'scope', widget_or_scope)

