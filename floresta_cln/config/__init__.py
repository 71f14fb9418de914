"""Configuration module for floresta-cln."""

from floresta_cln.config.loader import load_config, get_config_path, save_config
from floresta_cln.config.schema import BackendConfig, Config, LoggingConfig

__all__ = ["BackendConfig", "Config", "LoggingConfig", "load_config", "get_config_path", "save_config"]
