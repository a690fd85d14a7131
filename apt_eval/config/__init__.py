"""Configuration helpers."""

from apt_eval.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
