"""
Reversible string encryption with AES-256-CTR.

An encrypted value is an envelope ``{"iv": <hex>, "content": <hex>}``
serialised as compact JSON and base64-encoded. Both helpers are fail-open:
whatever goes wrong, the caller gets its input back unchanged.
"""

import base64
import json
import os
from dataclasses import dataclass
from typing import TypeAlias

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from backend_utils.shared import AppConfig, CodecError, ConfigurationError, Logger
from backend_utils.shared import get_config as _get_default_config

logger = Logger(__name__).get_logger()

ALGORITHM = "aes-256-ctr"
KEY_SIZE = 32
IV_SIZE = 16


@dataclass(frozen=True)
class CryptoConfig:
    algorithm: str
    secret_key: bytes


@dataclass(frozen=True)
class Ok:
    value: str


@dataclass(frozen=True)
class Fallback:
    original: str
    error: CodecError

    @property
    def value(self) -> str:
        return self.original


CodecResult: TypeAlias = Ok | Fallback


def get_crypto_config(config: AppConfig | None = None) -> CryptoConfig:
    """
    Resolve the cipher parameters from the process configuration.
    Reads the default ConfigStore on every call when no config is given.
    Raises ConfigurationError if the key is unset or is not 32 bytes.
    """
    if config is None:
        config = _get_default_config()

    if not config.secret_key:
        raise ConfigurationError("Secret key is not defined via configuration.")

    try:
        secret_key = bytes.fromhex(config.secret_key)
    except ValueError as e:
        raise ConfigurationError("Secret key is not a hexadecimal string.") from e

    if len(secret_key) != KEY_SIZE:
        raise ConfigurationError(f"Secret key must decode to {KEY_SIZE} bytes.")

    return CryptoConfig(algorithm=ALGORITHM, secret_key=secret_key)


_CIPHERS = {
    ALGORITHM: lambda key, iv: Cipher(algorithms.AES(key), modes.CTR(iv)),
}


def _cipher(crypto_config: CryptoConfig, iv: bytes) -> Cipher:
    try:
        build = _CIPHERS[crypto_config.algorithm]
    except KeyError as e:
        raise ConfigurationError(
            f"Unsupported algorithm: {crypto_config.algorithm}"
        ) from e
    return build(crypto_config.secret_key, iv)


def try_encrypt(
    text: str,
    iv: bytes | None = None,
    config: AppConfig | None = None,
) -> CodecResult:
    try:
        if not isinstance(text, str):
            raise TypeError(f"expected str, got {type(text).__name__}")

        crypto_config = get_crypto_config(config)
        iv = iv if iv is not None else os.urandom(IV_SIZE)

        encryptor = _cipher(crypto_config, iv).encryptor()
        encrypted = encryptor.update(text.encode("utf-8")) + encryptor.finalize()

        envelope = {"iv": iv.hex(), "content": encrypted.hex()}
        json_string = json.dumps(envelope, separators=(",", ":"))
        return Ok(base64.b64encode(json_string.encode("utf-8")).decode("ascii"))

    except (ConfigurationError, TypeError, ValueError) as e:
        logger.debug("Encryption skipped: %s", e)
        return Fallback(original=text, error=CodecError(str(e)))


def try_decrypt(payload: str, config: AppConfig | None = None) -> CodecResult:
    try:
        crypto_config = get_crypto_config(config)

        json_string = base64.b64decode(payload).decode("utf-8")
        envelope = json.loads(json_string)
        iv = bytes.fromhex(envelope["iv"])
        content = bytes.fromhex(envelope["content"])

        decryptor = _cipher(crypto_config, iv).decryptor()
        decrypted = decryptor.update(content) + decryptor.finalize()
        return Ok(decrypted.decode("utf-8"))

    # binascii.Error, JSONDecodeError and UnicodeDecodeError are ValueErrors
    except (ConfigurationError, KeyError, TypeError, ValueError) as e:
        logger.debug("Decryption skipped: %s", type(e).__name__)
        return Fallback(original=payload, error=CodecError(str(e)))


def encrypt(
    text: str,
    iv: bytes | None = None,
    *,
    config: AppConfig | None = None,
) -> str:
    """
    Encrypts `text` and returns the base64 envelope.
    A random 16 byte IV is generated unless `iv` is supplied; a fixed IV
    gives deterministic output and must not be reused in production.
    Returns `text` unchanged if encryption fails.
    """
    return try_encrypt(text, iv, config).value


def decrypt(payload: str, *, config: AppConfig | None = None) -> str:
    """
    Decrypts an envelope produced by `encrypt`.
    Returns `payload` unchanged if it cannot be decrypted.
    """
    return try_decrypt(payload, config).value
