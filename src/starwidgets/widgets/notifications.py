"""
Dismissible notification list

Every element of the output list is shown in its own notification box with
a delete button. Dismissing a box removes its element and republishes the
list through the output observable.

Boxes are addressed by a stable key rather than by the position they had
when rendered, so a dismissal that races with another edit of the list
removes the element the user clicked, or nothing if it is already gone.
"""

import logging
from typing import Any, Callable, Iterable, List, Optional
from uuid import uuid4

from fasthtml.common import Button, Div

from ..observable import Observable, lift
from ..scope import Scope
from ..theme import WidgetTheme, merge_classes, resolve_theme
from ..widget import Widget, WidgetKind

logger = logging.getLogger(__name__)


class ItemKeys:
    """Stable keys for the elements of a list, reconciled by identity."""

    def __init__(self):
        self._items: List[Any] = []
        self._keys: List[str] = []

    def sync(self, items: Iterable[Any]) -> List[str]:
        """Key ``items``, reusing the key of every element seen before."""
        available = list(zip(self._items, self._keys))
        items = list(items)
        keys = []
        for item in items:
            for n, (known, key) in enumerate(available):
                if known is item:
                    keys.append(key)
                    del available[n]
                    break
            else:
                keys.append(uuid4().hex[:12])
        self._items, self._keys = items, keys
        return list(keys)

    def index_of(self, key: str) -> Optional[int]:
        try:
            return self._keys.index(key)
        except ValueError:
            return None

    def __iter__(self):
        return iter(self._keys)


class NotificationList(Widget):
    """Notification widget; ``dismiss`` and ``dismiss_at`` remove elements."""

    def __init__(self, items: Iterable[Any] = (), *, layout: Callable[..., Any] = Div, cls: str = "",
                 theme: Optional[WidgetTheme] = None):
        theme = resolve_theme(theme)
        self.box_cls = merge_classes(cls, theme.notification_cls)
        self.delete_cls = theme.delete_cls
        self.item_layout = layout
        self.keys = ItemKeys()
        output = items if isinstance(items, Observable) else Observable(list(items))

        scope = Scope()
        theme.apply(scope)
        scope.bind("value", output)
        scope.method("dismiss", self.dismiss)
        super().__init__(WidgetKind.NOTIFICATIONS, {"value": output}, scope=scope,
                         updater=lambda new_items: output.set(list(new_items)))
        scope.dom = lift(self._boxes, output)

    def dismiss(self, key: str) -> bool:
        """Remove the element rendered under ``key``; unknown keys are ignored."""
        index = self.keys.index_of(key)
        if index is None:
            logger.info(f"Ignoring dismissal of unknown notification {key} in scope {self.scope.id}")
            return False
        return self.dismiss_at(index)

    def dismiss_at(self, index: int) -> bool:
        remaining = list(self.output.get())
        del remaining[index]
        self.output.set(remaining)
        return True

    def _box(self, key: str, element: Any):
        close = Button(cls=self.delete_cls, type="button",
                       **{"data-on-click": self.scope.action("dismiss", key=key)})
        return Div(close, element, cls=self.box_cls, id=f"{self.scope.id}-{key}")

    def _boxes(self, current: List[Any]):
        return self.item_layout(*[self._box(key, element) for key, element in zip(self.keys.sync(current), current)])


def notifications(items: Iterable[Any] = (), *, layout: Callable[..., Any] = Div, cls: str = "",
                  theme: Optional[WidgetTheme] = None) -> NotificationList:
    """
    Display the elements of ``items`` inside closable notification boxes.

    The boxes are passed as children to ``layout``. ``observe()`` returns the
    observable list of the elements that have not been dismissed.
    """
    return NotificationList(items, layout=layout, cls=cls, theme=theme)
