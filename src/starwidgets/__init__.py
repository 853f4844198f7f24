"""
starwidgets - Reactive widgets for FastHTML

Small interactive widgets (alert and confirm dialogs, LaTeX, syntax
highlighting, dismissible notifications, accordions) whose server-side
observable state is kept in sync with the page through Datastar.
"""

from .binding import bind_template
from .config import AssetConfig, Environment, LoggingConfig, WidgetsConfig, get_config, set_config
from .errors import (
    BindingError,
    ObservableClosedError,
    PayloadError,
    UnknownScopeError,
    UnknownWidgetKindError,
    WidgetConstructionError,
    WidgetError,
)
from .observable import Observable, Subscription, as_observable, connect, lift
from .registry import ScopeRepo
from .resources import ResourceRef
from .routes import configure_app, headers
from .scope import Scope, scope_of
from .theme import BULMA, WidgetTheme, get_default_theme, monsterui_theme, set_default_theme
from .view import CurrentFragment, ExecuteScript, MergeFragments, MergeSignals, ViewHandle, ViewStream
from .widget import Widget, WidgetKind
from .widgets import accordion, alert, confirm, highlight, latex, notifications, widget

__version__ = "0.1.0"

__all__ = [
    # Reactive core
    'Observable',
    'Subscription',
    'as_observable',
    'lift',
    'connect',
    'Scope',
    'scope_of',
    'ViewHandle',
    'ViewStream',
    'CurrentFragment',
    'ExecuteScript',
    'MergeFragments',
    'MergeSignals',
    'ResourceRef',
    'bind_template',
    'ScopeRepo',

    # Widgets
    'Widget',
    'WidgetKind',
    'widget',
    'alert',
    'confirm',
    'highlight',
    'latex',
    'notifications',
    'accordion',

    # Theming and configuration
    'WidgetTheme',
    'BULMA',
    'monsterui_theme',
    'get_default_theme',
    'set_default_theme',
    'WidgetsConfig',
    'AssetConfig',
    'LoggingConfig',
    'Environment',
    'get_config',
    'set_config',

    # Web integration
    'configure_app',
    'headers',

    # Errors
    'WidgetError',
    'WidgetConstructionError',
    'UnknownWidgetKindError',
    'BindingError',
    'ObservableClosedError',
    'UnknownScopeError',
    'PayloadError',
]
