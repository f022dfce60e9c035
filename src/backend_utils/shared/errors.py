class ConfigurationError(Exception):
    """Configuration is missing or malformed."""


class ConfigurationNotSetError(ConfigurationError):
    def __init__(self):
        super().__init__(
            "Configuration has not been set. "
            "Call set_config() before using any function that needs it."
        )


class ConfigurationAlreadySetError(ConfigurationError):
    def __init__(self):
        super().__init__("Configuration has already been set for this process.")


class CodecError(Exception):
    """Encryption or decryption of a single value failed."""
