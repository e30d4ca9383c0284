"""Core services for settings and logging."""

from .config import AppConfig, config_path, load_config, save_config
from .logging_setup import JsonFormatter, configure_logging, get_logger, log_dir, shutdown_logging

__all__ = [
    "AppConfig",
    "JsonFormatter",
    "config_path",
    "configure_logging",
    "get_logger",
    "load_config",
    "log_dir",
    "save_config",
    "shutdown_logging",
]
