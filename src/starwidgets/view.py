"""
View Handle

Outgoing side of a scope: the commands a scope wants executed in the browser
are queued here until the transport (``starwidgets.routes``) turns them into
Datastar server-sent events, one queue per live connection.
"""

import html
import json
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from fasthtml.common import to_xml

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecuteScript:
    script: str


@dataclass(frozen=True)
class MergeFragments:
    fragment: str
    selector: Optional[str] = None
    merge_mode: str = "morph"


@dataclass(frozen=True)
class MergeSignals:
    signals: Dict[str, Any]


ViewCommand = Union[ExecuteScript, MergeFragments, MergeSignals]


def js_literal(value: Any) -> str:
    """Encode a Python value as a JavaScript literal."""
    if isinstance(value, (set, frozenset, tuple)):
        value = list(value)
    return json.dumps(value, default=str)


def render_markup(value: Any) -> str:
    """Pre-render a value to a static HTML string."""
    if hasattr(value, '__html__'):
        return value.__html__()
    if isinstance(value, str):
        return html.escape(value)
    return to_xml(value)


class CurrentFragment:
    """
    Fragment rebuilt from the current values of ``sources`` every time it is
    rendered. Unlike an Observable ``dom`` it is never pushed to the page,
    so it suits views whose changes are applied by scripts.
    """

    def __init__(self, render, *sources):
        self.render = render
        self.sources = sources

    def __ft__(self):
        return self.render(*[source.get() for source in self.sources])


class ViewStream:
    """Commands delivered to one live connection, in push order."""

    def __init__(self, handle: 'ViewHandle', commands: deque):
        self._handle = handle
        self._commands = commands

    def __len__(self) -> int:
        return len(self._commands)

    def drain(self) -> List[ViewCommand]:
        with self._handle._lock:
            commands = list(self._commands)
            self._commands.clear()
        return commands

    def close(self) -> None:
        self._handle._release(self)


class ViewHandle:
    """
    Outgoing commands of one scope's DOM region.

    Every live connection listening on the handle receives its own copy of
    each command. While nobody listens, commands wait in a bounded backlog
    (oldest dropped first) that is handed to the next listener, or drained
    by the ``set``/``call`` responses and by the first render.
    """

    def __init__(self, root_id: str, backlog: int = 256):
        self.root_id = root_id
        self.backlog = backlog
        self._commands: deque = deque(maxlen=backlog)
        self._streams: List[ViewStream] = []
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ViewHandle({self.root_id!r}, pending={len(self)}, streams={len(self._streams)})"

    def __len__(self) -> int:
        return len(self._commands)

    @property
    def listeners(self) -> int:
        return len(self._streams)

    @property
    def selector(self) -> str:
        return f"#{self.root_id}"

    def element(self, element_id: str) -> str:
        """JavaScript expression resolving an element by id."""
        return f"document.getElementById({js_literal(element_id)})"

    def query(self, selector: str) -> str:
        """JavaScript expression resolving ``selector`` inside the scope root."""
        return f"document.querySelector({js_literal(f'{self.selector} {selector}')})"

    def push(self, command: ViewCommand) -> None:
        with self._lock:
            queues = [stream._commands for stream in self._streams] or [self._commands]
            for queue in queues:
                if len(queue) == queue.maxlen:
                    logger.debug(f"View queue of {self.root_id} full, dropping oldest command")
                queue.append(command)

    def listen(self) -> ViewStream:
        """Open a stream receiving every command pushed from now on (and the backlog)."""
        with self._lock:
            stream = ViewStream(self, deque(self._commands, maxlen=self.backlog))
            self._commands.clear()
            self._streams.append(stream)
        return stream

    def _release(self, stream: ViewStream) -> None:
        with self._lock:
            if stream in self._streams:
                self._streams.remove(stream)

    def run_js(self, script: str) -> None:
        self.push(ExecuteScript(script))

    def call(self, function: str, *args: Any) -> None:
        """Queue ``function(args...)`` with every argument JSON-encoded."""
        self.run_js(f"{function}({', '.join(js_literal(a) for a in args)})")

    def merge_fragment(self, fragment: Any, selector: Optional[str] = None, merge_mode: str = "morph") -> None:
        if not isinstance(fragment, str):
            fragment = to_xml(fragment)
        self.push(MergeFragments(fragment, selector=selector, merge_mode=merge_mode))

    def merge_signals(self, signals: Dict[str, Any]) -> None:
        self.push(MergeSignals(signals))

    def drain(self) -> List[ViewCommand]:
        """Remove and return the backlog, oldest first."""
        with self._lock:
            commands = list(self._commands)
            self._commands.clear()
        return commands

    def scripts(self) -> List[str]:
        """Drain the backlog keeping only script bodies."""
        return [c.script for c in self.drain() if isinstance(c, ExecuteScript)]
