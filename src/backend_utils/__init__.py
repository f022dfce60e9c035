from .core import decrypt, decrypt_object_items, encrypt, encrypt_object_items
from .shared import AppConfig, get_config, set_config
from .utils import (
    convert_request_data,
    is_empty_object,
    sleep,
    to_lower_camel_case,
    to_snake_case,
)

__all__ = [
    "AppConfig",
    "convert_request_data",
    "decrypt",
    "decrypt_object_items",
    "encrypt",
    "encrypt_object_items",
    "get_config",
    "is_empty_object",
    "set_config",
    "sleep",
    "to_lower_camel_case",
    "to_snake_case",
]
