"""Configuration module for the OA annotation store sync client."""
import os

from dotenv import load_dotenv

load_dotenv()


APP_NAME = "OA Annotation Store Sync"
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

# Store endpoint defaults
STORE_PREFIX = os.environ.get("STORE_PREFIX", "/store")
STORE_EMULATE_HTTP = os.environ.get("STORE_EMULATE_HTTP", "false").lower() in ("1", "true", "yes")
STORE_EMULATE_JSON = os.environ.get("STORE_EMULATE_JSON", "false").lower() in ("1", "true", "yes")

# Transport
STORE_TIMEOUT = float(os.environ.get("STORE_TIMEOUT", "30.0"))


def get_settings() -> dict:
    """Get application settings as a dictionary."""
    return {
        "app_name": APP_NAME,
        "log_level": LOG_LEVEL,
        "store_prefix": STORE_PREFIX,
        "emulate_http": STORE_EMULATE_HTTP,
        "emulate_json": STORE_EMULATE_JSON,
        "store_timeout": STORE_TIMEOUT,
    }
