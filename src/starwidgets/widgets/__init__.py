"""
Widget variants and the ``widget`` factory.
"""

from typing import Any, Callable, Dict

from ..widget import Widget, WidgetKind
from .accordion import Accordion, AccordionOption, MultiSelection, SingleSelection, accordion
from .dialogs import alert, confirm
from .highlight import highlight
from .latex import latex
from .notifications import ItemKeys, NotificationList, notifications

CONSTRUCTORS: Dict[WidgetKind, Callable[..., Widget]] = {
    WidgetKind.ALERT: alert,
    WidgetKind.CONFIRM: confirm,
    WidgetKind.HIGHLIGHT: highlight,
    WidgetKind.LATEX: latex,
    WidgetKind.NOTIFICATIONS: notifications,
    WidgetKind.ACCORDION: accordion,
}


def widget(kind: Any, *args: Any, **kwargs: Any) -> Widget:
    """Build a widget of ``kind`` (a WidgetKind or its name) from the variant's arguments."""
    return CONSTRUCTORS[WidgetKind.coerce(kind)](*args, **kwargs)


__all__ = [
    'widget',
    'CONSTRUCTORS',
    'alert',
    'confirm',
    'highlight',
    'latex',
    'notifications',
    'NotificationList',
    'ItemKeys',
    'accordion',
    'Accordion',
    'AccordionOption',
    'SingleSelection',
    'MultiSelection',
]
