"""
Browser dialogs: alert and confirm

Both widgets render an invisible scope; the dialog pops up whenever their
``text`` observable is written, so the widget has to be part of the page.

```python
wdg = alert("Error!")
wdg.invoke()                       # shows "Error!" again
wdg.invoke("New error message!")   # sets the text, then shows it

ask = confirm(lambda ok: print("overwrite" if ok else "abort"), "File exists, overwrite?")
ask.invoke()
```
"""

from typing import Any, Callable, Optional, Tuple

from ..observable import Observable, as_observable
from ..scope import Scope
from ..theme import WidgetTheme
from ..view import js_literal
from ..widget import Widget, WidgetKind, hidden_layout


def alert(text: Any = "", *, value: Any = None, theme: Optional[WidgetTheme] = None) -> Widget:
    """
    Widget showing ``window.alert`` with its text.

    ``update(text)`` replaces the message and shows it, ``trigger()`` shows
    the current message again. ``theme`` is accepted for a uniform
    constructor signature; the widget is never visible.
    """
    text_obs = as_observable(text if value is None else value)

    scope = Scope()
    scope.bind("text", text_obs)
    scope.on_change("text", lambda message: scope.view.call("alert", message))

    def update(text: Any) -> None:
        text_obs.set(text)

    return Widget(WidgetKind.ALERT, {"text": text_obs}, scope=scope, output=text_obs,
                  layout=hidden_layout, updater=update)


def _split_confirm_args(args: Tuple[Any, ...], function: Optional[Callable] = None,
                        text: Optional[Any] = None) -> Tuple[Optional[Callable], Optional[Any]]:
    """Accept a callback and/or a text in either order."""
    for arg in args:
        if callable(arg):
            if function is not None:
                raise TypeError("confirm takes a single callback")
            function = arg
        else:
            if text is not None:
                raise TypeError("confirm takes a single text")
            text = arg
    return function, text


def _ignore(_result: bool) -> None:
    return None


def _answer(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"confirm answers are booleans, got {value!r}")
    return value


def confirm(*args: Any, function: Optional[Callable[[bool], Any]] = None, text: Any = None,
            theme: Optional[WidgetTheme] = None) -> Widget:
    """
    Widget showing ``window.confirm`` and reporting the answer.

    ``confirm([function,] text)`` or ``confirm(text[, function])``. The
    output observable is set to ``True`` when the user accepts and ``False``
    otherwise, and every answer is passed to the stored function.
    ``update`` accepts a new function and/or text in either order.
    """
    function, text = _split_confirm_args(args, function, text)
    text_obs = as_observable("" if text is None else text)

    scope = Scope()
    scope.bind("text", text_obs)
    result = scope.bind("value", Observable(False), writable=_answer)

    @scope.on_change("text")
    def ask(message: Any) -> None:
        scope.view.run_js(scope.post_value_js("value", f"confirm({js_literal(message)})"))

    def update(*args: Any, function: Optional[Callable] = None, text: Any = None) -> None:
        function, text = _split_confirm_args(args, function, text)
        if function is not None:
            wdg["function"] = function
        text_obs.set(text_obs.get() if text is None else text)

    wdg = Widget(WidgetKind.CONFIRM,
                 {"text": text_obs, "function": function or _ignore, "value": result},
                 scope=scope, output=result, primary="text",
                 layout=hidden_layout, updater=update)
    result.subscribe(lambda answer: wdg["function"](answer))
    return wdg
