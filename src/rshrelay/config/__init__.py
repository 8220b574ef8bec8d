"""Configuration management for rshrelay.

Loads and validates YAML-based configuration with Pydantic models.
Environment variables override file values.
"""

from rshrelay.config.settings import Settings, load_settings

__all__ = ["Settings", "load_settings"]
