from .converters import (
    convert_request_data,
    describe_request,
    hide_sensitive_data,
    to_lower_camel_case,
    to_snake_case,
)
from .miscellaneous import is_empty_object, sleep
from .validations import (
    check_json_body,
    check_request_validity,
    check_url_accessibility,
    install_validation_handlers,
    is_valid_email,
    is_valid_url,
)

__all__ = [
    "check_json_body",
    "check_request_validity",
    "check_url_accessibility",
    "convert_request_data",
    "describe_request",
    "hide_sensitive_data",
    "install_validation_handlers",
    "is_empty_object",
    "is_valid_email",
    "is_valid_url",
    "sleep",
    "to_lower_camel_case",
    "to_snake_case",
]
