"""
Configuration Management for starwidgets

Process-wide settings supplied once at application start (see
``starwidgets.routes.configure_app``) and read by widget constructors,
scopes and routes.
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Environment(Enum):
    """Application environments"""
    DEVELOPMENT = "development"
    TESTING = "testing"
    PRODUCTION = "production"


@dataclass
class AssetConfig:
    """Locations of the browser-side engines the widgets drive"""
    katex_js: str = "https://cdn.jsdelivr.net/npm/katex@0.16.11/dist/katex.min.js"
    katex_css: str = "https://cdn.jsdelivr.net/npm/katex@0.16.11/dist/katex.min.css"
    prism_js: str = "https://cdn.jsdelivr.net/npm/prismjs@1.29.0/prism.min.js"
    prism_css: str = "https://cdn.jsdelivr.net/npm/prismjs@1.29.0/themes/prism.min.css"
    datastar_js: str = "https://cdn.jsdelivr.net/gh/starfederation/datastar@v1.0.0-beta.11/bundles/datastar.js"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class WidgetsConfig:
    """Complete widget library configuration"""
    environment: Environment = Environment.DEVELOPMENT
    route_prefix: str = "/widgets"
    theme: str = "bulma"
    live_poll_interval: float = 0.1  # seconds between view queue checks
    live_heartbeat: float = 15
    scope_ttl: Optional[int] = 3600  # seconds since last use, None keeps scopes until removed
    view_backlog: int = 256  # commands kept per view queue
    assets: AssetConfig = field(default_factory=AssetConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        self.route_prefix = "/" + self.route_prefix.strip("/")

    @classmethod
    def for_environment(cls, environment: Environment) -> 'WidgetsConfig':
        """Create configuration for specific environment"""
        config = cls(environment=environment)

        if environment == Environment.DEVELOPMENT:
            config.logging.level = "DEBUG"

        elif environment == Environment.TESTING:
            config.logging.level = "WARNING"
            config.live_poll_interval = 0.01

        elif environment == Environment.PRODUCTION:
            config.logging.level = "INFO"

        return config

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'WidgetsConfig':
        """Create configuration from dictionary"""
        environment = Environment(config_dict.get("environment", Environment.DEVELOPMENT.value))
        config = cls.for_environment(environment)

        for key in ("route_prefix", "theme", "live_poll_interval", "live_heartbeat", "scope_ttl", "view_backlog"):
            if key in config_dict:
                setattr(config, key, config_dict[key])
        config.route_prefix = "/" + config.route_prefix.strip("/")

        for key, value in config_dict.get("assets", {}).items():
            if not hasattr(config.assets, key):
                raise ValueError(f"Unknown asset setting: {key}")
            setattr(config.assets, key, value)

        for key, value in config_dict.get("logging", {}).items():
            if not hasattr(config.logging, key):
                raise ValueError(f"Unknown logging setting: {key}")
            setattr(config.logging, key, value)

        return config

    @classmethod
    def from_env(cls) -> 'WidgetsConfig':
        """Create configuration from STARWIDGETS_* environment variables"""
        config_dict: Dict[str, Any] = {
            "environment": os.environ.get("STARWIDGETS_ENV", Environment.DEVELOPMENT.value),
        }
        if "STARWIDGETS_THEME" in os.environ:
            config_dict["theme"] = os.environ["STARWIDGETS_THEME"]
        if "STARWIDGETS_ROUTE_PREFIX" in os.environ:
            config_dict["route_prefix"] = os.environ["STARWIDGETS_ROUTE_PREFIX"]
        if "STARWIDGETS_LOG_LEVEL" in os.environ:
            config_dict["logging"] = {"level": os.environ["STARWIDGETS_LOG_LEVEL"]}
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "environment": self.environment.value,
            "route_prefix": self.route_prefix,
            "theme": self.theme,
            "live_poll_interval": self.live_poll_interval,
            "live_heartbeat": self.live_heartbeat,
            "scope_ttl": self.scope_ttl,
            "view_backlog": self.view_backlog,
            "assets": dict(vars(self.assets)),
            "logging": dict(vars(self.logging)),
        }


_config: Optional[WidgetsConfig] = None


def get_config() -> WidgetsConfig:
    """Return the active configuration, building it from the environment on first use."""
    global _config
    if _config is None:
        _config = WidgetsConfig.from_env()
    return _config


def set_config(config: Optional[WidgetsConfig]) -> None:
    """Install ``config`` as the active configuration (``None`` resets it)."""
    global _config
    _config = config


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """Apply ``config`` to the package logger."""
    logger = logging.getLogger("starwidgets")
    logger.setLevel(config.level.upper())
    if not logger.handlers:
        handler = logging.StreamHandler()
        logger.addHandler(handler)
    for handler in logger.handlers:
        handler.setFormatter(logging.Formatter(config.format))
    return logger
