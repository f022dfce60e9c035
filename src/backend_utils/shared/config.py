from collections.abc import Mapping
from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING
from os import PathLike
from pathlib import Path
from string import hexdigits
from threading import Lock
from tomllib import load

from pydantic import BaseModel, ValidationError, field_validator

from .errors import (
    ConfigurationAlreadySetError,
    ConfigurationError,
    ConfigurationNotSetError,
)

DEFAULT_CONFIG_PATH = Path("config.toml")

SECRET_KEY_HEX_LENGTH = 64


# ================================================================================
#       Process configuration
# ================================================================================
class AppConfig(BaseModel, frozen=True):
    secret_key: str  # 64 hex characters, decodes to the 32 byte cipher key
    development_token: str
    timezone: str = "UTC"

    @field_validator("secret_key", "development_token")
    @classmethod
    def not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must be provided")
        return value

    @field_validator("secret_key")
    @classmethod
    def is_hex_key(cls, value: str) -> str:
        if len(value) != SECRET_KEY_HEX_LENGTH or any(c not in hexdigits for c in value):
            raise ValueError(
                f"must be {SECRET_KEY_HEX_LENGTH} hexadecimal characters"
            )
        return value


class ConfigStore:
    """Holds one AppConfig for the lifetime of the process.

    The value can be written exactly once; a second write raises
    ConfigurationAlreadySetError and keeps the stored value.
    """

    def __init__(self):
        self.__config: AppConfig | None = None
        self.__lock = Lock()

    @property
    def is_set(self) -> bool:
        return self.__config is not None

    def set(self, config: AppConfig | Mapping) -> AppConfig:
        if self.__config is not None:
            raise ConfigurationAlreadySetError()

        if not isinstance(config, AppConfig):
            try:
                config = AppConfig.model_validate(dict(config))
            except ValidationError as e:
                raise ConfigurationError(f"Invalid configuration: {e}") from e

        with self.__lock:
            if self.__config is not None:
                raise ConfigurationAlreadySetError()
            self.__config = config

        return config

    def get(self) -> AppConfig:
        if self.__config is None:
            raise ConfigurationNotSetError()
        return self.__config


_default_store = ConfigStore()


def set_config(config: AppConfig | Mapping) -> AppConfig:
    return _default_store.set(config)


def get_config() -> AppConfig:
    return _default_store.get()


def is_config_set() -> bool:
    return _default_store.is_set


# ================================================================================
#       Service settings
# ================================================================================
class General(BaseModel):
    title: str = "backend-utils"


class Logging(BaseModel):
    level: int = INFO

    @field_validator("level", mode="before")
    @classmethod
    def convert_log_level(cls, value):
        if isinstance(value, int):
            return value
        log_levels = {
            "DEBUG": DEBUG,
            "INFO": INFO,
            "WARNING": WARNING,
            "ERROR": ERROR,
            "CRITICAL": CRITICAL,
        }
        return log_levels.get(value.upper(), INFO)


class Paths(BaseModel):
    logs: str | None = None


class RateLimit(BaseModel):
    timeout_period: int = 10
    requests_per_second: int = 10


class Network(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    reload: bool = False

    rate_limit: RateLimit = RateLimit()


class Settings(BaseModel):
    general: General = General()
    paths: Paths = Paths()
    logging: Logging = Logging()
    network: Network = Network()
    security: AppConfig | None = None


def load_config(
    shared_config_file: PathLike | str = DEFAULT_CONFIG_PATH,
    specific_config_file: PathLike | str | None = None,
) -> Settings:
    """Load and merge settings from TOML files."""
    # Load shared config
    with Path(shared_config_file).open("rb") as f:
        config_data = load(f)

    # Load and merge specific config if provided
    if specific_config_file:
        with Path(specific_config_file).open("rb") as f:
            specific_data = load(f)
            config_data.update(specific_data)

    return Settings(**config_data)
