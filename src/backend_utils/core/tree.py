"""
Recursive application of the string codec to the leaves of a
JSON-like tree of mappings, sequences and scalars.
"""

from collections.abc import Callable, Collection, Iterable, Mapping
from datetime import date, time
from enum import Enum, auto
from typing import Any

from backend_utils.shared import AppConfig

from .crypto import decrypt, encrypt


class NodeKind(Enum):
    SCALAR = auto()
    STRING = auto()
    SEQUENCE = auto()
    MAPPING = auto()
    TEMPORAL = auto()


def classify(node: Any) -> NodeKind:
    if isinstance(node, str):
        return NodeKind.STRING
    # datetime is a subclass of date
    if isinstance(node, (date, time)):
        return NodeKind.TEMPORAL
    if isinstance(node, Mapping):
        return NodeKind.MAPPING
    if isinstance(node, (list, tuple)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def _walk(
    node: Any,
    transform: Callable[[str], str],
    allowed: Collection[str] | None,
) -> Any:
    kind = classify(node)

    if kind is NodeKind.SEQUENCE:
        items = [_walk(item, transform, allowed) for item in node]
        return items if isinstance(node, list) else tuple(items)

    if kind is NodeKind.MAPPING:
        if not node:
            return node

        converted = {}
        for key, value in node.items():
            # The allow-list only gates direct string values;
            # everything else is still walked.
            if classify(value) is NodeKind.STRING and (allowed is None or key in allowed):
                converted[key] = transform(value)
            else:
                converted[key] = _walk(value, transform, allowed)
        return converted

    # STRING outside a mapping, TEMPORAL and SCALAR pass through untouched
    return node


def _allow_list(properties: str | Iterable[str] | None) -> frozenset[str] | None:
    if properties is None:
        return None
    # a bare key name is a one-key allow-list, not a set of characters
    if isinstance(properties, str):
        return frozenset([properties])
    return frozenset(properties)


def encrypt_object_items(
    obj: Any,
    properties_allowed: str | Iterable[str] | None = None,
    iv: bytes | None = None,
    *,
    config: AppConfig | None = None,
) -> Any:
    """
    Returns a copy of `obj` with string values of its mappings encrypted.

    Only values stored under a key in `properties_allowed` are encrypted
    when it is given. Non-string values are kept as is, and `obj` itself is
    never modified.
    """
    return _walk(
        obj,
        lambda value: encrypt(value, iv, config=config),
        _allow_list(properties_allowed),
    )


def decrypt_object_items(
    obj: Any,
    properties_allowed: str | Iterable[str] | None = None,
    *,
    config: AppConfig | None = None,
) -> Any:
    """Inverse of `encrypt_object_items`."""
    return _walk(
        obj,
        lambda value: decrypt(value, config=config),
        _allow_list(properties_allowed),
    )
