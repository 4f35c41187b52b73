"""Configuration module for schemabridge."""

from .settings import Settings, TranslationConfig, get_settings
from .logging import get_logger, log_translation_config, setup_logging

__all__ = ["Settings", "TranslationConfig", "get_settings", "setup_logging", "get_logger", "log_translation_config"]
