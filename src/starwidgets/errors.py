"""
Widget Errors

Exception taxonomy shared by observables, scopes, widgets and the web routes.
"""


class WidgetError(Exception):
    """Base class for all starwidgets errors."""


class WidgetConstructionError(WidgetError, ValueError):
    """Raised when a widget is built from an invalid configuration."""


class UnknownWidgetKindError(WidgetConstructionError):
    """Raised by the widget factory for a kind outside WidgetKind."""


class BindingError(WidgetError, KeyError):
    """Raised for unknown or duplicate bound names, hooks and methods."""

    def __str__(self):
        # KeyError quotes its argument, keep the plain message
        return str(self.args[0]) if self.args else ""


class ObservableClosedError(WidgetError, RuntimeError):
    """Raised when writing to an observable whose owner tore it down."""


class UnknownScopeError(WidgetError, LookupError):
    """Raised when a view event targets a scope that is not registered."""


class PayloadError(WidgetError, ValueError):
    """Raised when a view event carries a malformed payload."""
