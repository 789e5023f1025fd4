"""Configuration for the LLM gateway."""

import logging
import os
from functools import lru_cache
from dotenv import load_dotenv

load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


@lru_cache
def get_settings() -> "Settings":
    """Get cached settings instance."""
    return Settings()


class Settings:
    """Gateway settings."""

    def __init__(self):
        # Transport timeouts (seconds)
        self.request_timeout: float = _env_float("GATEWAY_REQUEST_TIMEOUT", 60.0)
        self.stream_timeout: float = _env_float("GATEWAY_STREAM_TIMEOUT", 300.0)
        self.image_timeout: float = _env_float("GATEWAY_IMAGE_TIMEOUT", 120.0)

        # Attempts for unary requests; 1 disables retrying
        self.max_retries: int = int(os.getenv("GATEWAY_MAX_RETRIES", "3"))

        self.log_level: str = os.getenv("GATEWAY_LOG_LEVEL", "INFO").upper()

        # Attribution headers for aggregators such as OpenRouter
        self.app_url: str = os.getenv("GATEWAY_APP_URL", "https://github.com/llm-gateway/llm-gateway")
        self.app_title: str = os.getenv("GATEWAY_APP_TITLE", "LLM Gateway")

        # Prefix for settings read by EnvSettingsStore
        self.settings_env_prefix: str = os.getenv("GATEWAY_SETTINGS_PREFIX", "GATEWAY_")


def configure_logging(level: str | None = None) -> None:
    """Attach a stream handler to the ``gateway`` logger.

    Safe to call more than once; the handler is only installed the first time.
    """
    logger = logging.getLogger("gateway")
    logger.setLevel(level or get_settings().log_level)
    if not any(getattr(h, "_gateway_handler", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._gateway_handler = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
