from .crypto import (
    CryptoConfig,
    Fallback,
    Ok,
    decrypt,
    encrypt,
    get_crypto_config,
    try_decrypt,
    try_encrypt,
)
from .tree import NodeKind, classify, decrypt_object_items, encrypt_object_items

__all__ = [
    "CryptoConfig",
    "Fallback",
    "NodeKind",
    "Ok",
    "classify",
    "decrypt",
    "decrypt_object_items",
    "encrypt",
    "encrypt_object_items",
    "get_crypto_config",
    "try_decrypt",
    "try_encrypt",
]
