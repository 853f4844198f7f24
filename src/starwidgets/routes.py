"""
FastHTML integration

Routes carrying view events into scopes and scope commands back to the page
as Datastar server-sent events. They are mounted as a plain Starlette router
so the handlers read the raw request body themselves:

- ``GET  {prefix}/{scope_id}/live``           stream of queued view commands
- ``POST {prefix}/{scope_id}/set/{name}``     write ``value`` into a writable observable
- ``POST {prefix}/{scope_id}/call/{method}``  run a scope method with the query parameters

```python
from fasthtml.common import fast_app
from starwidgets import configure_app, headers

app, rt = fast_app(hdrs=headers())
configure_app(app)
```
"""

import asyncio
import logging
import time
from typing import List, Optional

from datastar_py import SSE_HEADERS
from datastar_py import ServerSentEventGenerator as SSE
from fasthtml.common import Script
from starlette.requests import Request
from starlette.responses import Response, StreamingResponse
from starlette.routing import Mount, Route

from .config import WidgetsConfig, configure_logging, get_config, set_config
from .errors import BindingError, PayloadError, UnknownScopeError
from .events import read_payload
from .registry import ScopeRepo
from .scope import Scope
from .theme import WidgetTheme, resolve_theme, set_default_theme
from .view import ExecuteScript, MergeFragments, MergeSignals, ViewCommand

logger = logging.getLogger(__name__)


def to_sse(command: ViewCommand) -> str:
    """Encode one view command as a Datastar server-sent event."""
    if isinstance(command, ExecuteScript):
        return SSE.execute_script(command.script)
    if isinstance(command, MergeFragments):
        return SSE.merge_fragments(command.fragment, selector=command.selector, merge_mode=command.merge_mode)
    if isinstance(command, MergeSignals):
        return SSE.merge_signals(command.signals)
    raise TypeError(f"Unknown view command: {command!r}")


def _get_scope(request: Request) -> Scope:
    scope = ScopeRepo().get(request.path_params['scope_id'])
    ScopeRepo().touch(scope.id, get_config().scope_ttl)
    return scope


def _command_response(scope: Scope) -> StreamingResponse:
    """Respond with the backlog; empty while live streams carry the commands."""
    commands = scope.view.drain()

    async def sse_stream():
        for command in commands:
            yield to_sse(command)

    return StreamingResponse(sse_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


async def live(request: Request):
    """Stream a scope's view commands until the page goes away."""
    try:
        scope = _get_scope(request)
    except UnknownScopeError as e:
        return Response(str(e), status_code=404)
    config = get_config()

    async def sse_stream():
        stream = scope.view.listen()
        last_beat = time.monotonic()
        try:
            while True:
                for command in stream.drain():
                    yield to_sse(command)
                if time.monotonic() - last_beat >= config.live_heartbeat:
                    last_beat = time.monotonic()
                    ScopeRepo().touch(scope.id, config.scope_ttl)
                    yield SSE.merge_signals(scope.signals())
                if await request.is_disconnected():
                    logger.debug(f"Live stream for scope {scope.id} disconnected")
                    break
                await asyncio.sleep(config.live_poll_interval)
        finally:
            stream.close()

    return StreamingResponse(sse_stream(), media_type="text/event-stream", headers=SSE_HEADERS)


async def set_value(request: Request):
    """Write the payload ``value`` into the writable observable bound to ``name``."""
    name = request.path_params['name']
    try:
        scope = _get_scope(request)
        if name not in scope.writable:
            raise BindingError(f"No writable {name!r} in scope {scope.id}")
        payload = await read_payload(request)
        if 'value' not in payload:
            raise PayloadError("Payload has no 'value'")
        scope.receive(name, payload['value'])
    except (UnknownScopeError, BindingError) as e:
        return Response(str(e), status_code=404)
    except PayloadError as e:
        return Response(str(e), status_code=400)
    return _command_response(scope)


async def call_method(request: Request):
    """Run a scope method with the query parameters as keyword arguments."""
    method = request.path_params['method']
    params = {k: v for k, v in request.query_params.items() if k != 'datastar'}
    try:
        scope = _get_scope(request)
        scope.call(method, **params)
    except (UnknownScopeError, BindingError) as e:
        return Response(str(e), status_code=404)
    except PayloadError as e:
        return Response(str(e), status_code=400)
    return _command_response(scope)


def widget_routes() -> List[Route]:
    return [
        Route("/{scope_id}/live", live, methods=["GET"]),
        Route("/{scope_id}/set/{name}", set_value, methods=["POST"]),
        Route("/{scope_id}/call/{method}", call_method, methods=["POST"]),
    ]


def register_routes(app, prefix: str) -> None:
    """Mount the widget routes under ``prefix``."""
    app.router.routes.append(Mount(prefix, routes=widget_routes()))
    for route in widget_routes():
        logger.info(f"Registered {', '.join(sorted(route.methods))} {prefix}{route.path}")


def headers(theme: Optional[WidgetTheme] = None) -> tuple:
    """Page headers: the Datastar bundle plus the theme's stylesheets."""
    datastar_script = Script(src=get_config().assets.datastar_js, type="module")
    return (datastar_script, *resolve_theme(theme).headers())


def configure_app(app, config: Optional[WidgetsConfig] = None, theme: Optional[WidgetTheme] = None):
    """
    Configure a FastHTML app for starwidgets.

    Installs ``config`` (default: from STARWIDGETS_* environment variables)
    as the process-wide configuration, applies its logging settings, sets the
    default theme and registers the widget routes.

    Args:
        app: FastHTML application instance
        config: Widget configuration
        theme: Default theme overriding ``config.theme``

    Returns:
        The configured app instance
    """
    config = config or WidgetsConfig.from_env()
    set_config(config)
    configure_logging(config.logging)
    if theme is not None:
        set_default_theme(theme)
    register_routes(app, config.route_prefix)
    logger.info(f"starwidgets configured ({config.environment.value}, prefix {config.route_prefix})")
    return app
