import pytest

from backend_utils.shared import AppConfig, is_config_set, set_config

SECRET_KEY = "0a06bb4c1e6d2b8f62ec71166d8997f588b3b3b1c313bbf14fcdfc9ba882827c"
DEVELOPMENT_TOKEN = "IgnoreRateLimit_2004"

APP_CONFIG = AppConfig(
    secret_key=SECRET_KEY,
    development_token=DEVELOPMENT_TOKEN,
    timezone="UTC",
)

# The process-wide store can only be written once
if not is_config_set():
    set_config(APP_CONFIG)


@pytest.fixture(scope="session")
def app_config() -> AppConfig:
    return APP_CONFIG
