"""Configuration loading."""

from mapkeeper.config.loader import config_from_env, load_config

__all__ = ["config_from_env", "load_config"]
