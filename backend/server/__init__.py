"""
Server Module

Application factory and configuration for the Avatarcyan API.
"""

from .app import create_app
from .config import ConfigError, Settings

__all__ = ["create_app", "Settings", "ConfigError"]
