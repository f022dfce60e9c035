import re
from collections.abc import Iterable, Mapping
from datetime import date, time
from typing import Any

from starlette.requests import Request

MASK = "****"

FORBIDDEN_HEADERS = ["authorization", "x-development-token"]

FORBIDDEN_PROPERTIES = [
    "password",
    "token",
    "email",
    "firstName",
    "middleName",
    "lastName",
    "dateOfBirth",
    "profilePictureUrl",
    "profilePictureThumbnailUrl",
]

_SNAKE_SEGMENT = re.compile(r"_([a-z])")
_UPPER_LETTER = re.compile(r"[A-Z]")


# ================================================================================
#       Key case conversion
# ================================================================================
def _convert_keys(obj: Mapping, convert_key) -> dict:
    def process_value(value):
        if isinstance(value, (date, time)):
            return value
        if isinstance(value, (list, tuple)):
            return [process_value(item) for item in value]
        if isinstance(value, Mapping):
            return _convert_keys(value, convert_key)
        return value

    return {
        convert_key(key) if isinstance(key, str) else key: process_value(value)
        for key, value in obj.items()
    }


def to_lower_camel_case(obj: Mapping) -> dict:
    """Converts the keys of a mapping from snake_case to lowerCamelCase, recursively."""
    return _convert_keys(
        obj, lambda key: _SNAKE_SEGMENT.sub(lambda m: m.group(1).upper(), key)
    )


def to_snake_case(obj: Mapping) -> dict:
    """Converts the keys of a mapping from lowerCamelCase to snake_case, recursively."""
    return _convert_keys(
        obj, lambda key: _UPPER_LETTER.sub(lambda m: f"_{m.group(0).lower()}", key)
    )


# ================================================================================
#       Request sanitising
# ================================================================================
def _normalise(name: str) -> str:
    return name.lower().replace("_", "").replace("-", "")


def hide_sensitive_data(obj: Any, forbidden_properties: Iterable[str]) -> Any:
    """
    Returns a copy of `obj` where every value stored under a forbidden key
    is replaced with a mask.

    A key is forbidden when its name contains one of `forbidden_properties`,
    compared case-insensitively and ignoring `_` and `-`, so `first_name`
    and `firstName` are treated alike. Nested mappings and sequences are
    walked; an object met again on its own path is returned unchanged.
    Anything that is not a mapping or sequence is returned as is.
    """
    forbidden = [_normalise(prop) for prop in forbidden_properties]
    return _hide(obj, forbidden, set())


def _hide(obj: Any, forbidden: list[str], ancestors: set[int]) -> Any:
    if not isinstance(obj, (Mapping, list, tuple)) or id(obj) in ancestors:
        return obj

    ancestors.add(id(obj))
    try:
        if isinstance(obj, Mapping):
            return {
                key: MASK
                if any(prop in _normalise(str(key)) for prop in forbidden)
                else _hide(value, forbidden, ancestors)
                for key, value in obj.items()
            }
        return [_hide(item, forbidden, ancestors) for item in obj]
    finally:
        ancestors.discard(id(obj))


def convert_request_data(req: Mapping) -> dict:
    """Extracts the loggable parts of a request with sensitive values masked."""
    return {
        "method": req.get("method"),
        "original_url": req.get("original_url"),
        "headers": hide_sensitive_data(req.get("headers"), FORBIDDEN_HEADERS),
        "body": hide_sensitive_data(req.get("body"), FORBIDDEN_PROPERTIES),
        "query": hide_sensitive_data(req.get("query"), FORBIDDEN_PROPERTIES),
        "params": hide_sensitive_data(req.get("params"), FORBIDDEN_PROPERTIES),
        "ip": req.get("ip"),
        "hostname": req.get("hostname"),
        "protocol": req.get("protocol"),
        "path": req.get("path"),
        "cookies": hide_sensitive_data(req.get("cookies"), FORBIDDEN_PROPERTIES),
    }


def describe_request(request: Request, body: Any = None) -> dict:
    """Builds the mapping consumed by `convert_request_data` from a Starlette request."""
    url = request.url
    original_url = f"{url.path}?{url.query}" if url.query else url.path

    return {
        "method": request.method,
        "original_url": original_url,
        "headers": dict(request.headers),
        "body": body,
        "query": dict(request.query_params),
        "params": dict(request.path_params),
        "ip": request.client.host if request.client else None,
        "hostname": url.hostname,
        "protocol": url.scheme,
        "path": url.path,
        "cookies": dict(request.cookies),
    }
