"""Application layer: bootstrap, config persistence and startup timing."""

from .bootstrap import create_app, AppContext  # noqa: F401
from .config_store import (  # noqa: F401
    AppConfig,
    load_config,
    save_config,
    CONFIG_VERSION,
)
from .timing import TimingLogger  # noqa: F401

__all__ = [
    "create_app",
    "AppContext",
    "AppConfig",
    "load_config",
    "save_config",
    "CONFIG_VERSION",
    "TimingLogger",
]
