import pytest

from starwidgets.config import Environment, WidgetsConfig, set_config
from starwidgets.registry import ScopeRepo
from starwidgets.theme import set_default_theme


@pytest.fixture(autouse=True)
def testing_config():
    """Fresh testing configuration, default theme and scope registry for every test."""
    config = WidgetsConfig.for_environment(Environment.TESTING)
    set_config(config)
    set_default_theme(None)
    ScopeRepo().clear()
    yield config
    ScopeRepo().clear()
    set_config(None)
