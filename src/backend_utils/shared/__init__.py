from .config import (
    AppConfig,
    ConfigStore,
    Settings,
    get_config,
    is_config_set,
    load_config,
    set_config,
)
from .errors import (
    CodecError,
    ConfigurationAlreadySetError,
    ConfigurationError,
    ConfigurationNotSetError,
)
from .logger import Logger

__all__ = [
    "AppConfig",
    "CodecError",
    "ConfigStore",
    "ConfigurationAlreadySetError",
    "ConfigurationError",
    "ConfigurationNotSetError",
    "Logger",
    "Settings",
    "get_config",
    "is_config_set",
    "load_config",
    "set_config",
]
