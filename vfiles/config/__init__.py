"""
Configuration System

Manages configuration for vfiles with a layered approach.

Configuration Priority (highest to lowest):
    1. Programmatic (passed to VFilesConfig())
    2. Environment variables (VFILES_* prefix)
    3. Config file (VFilesConfig.from_file)
    4. Built-in defaults
"""

from vfiles.config.settings import VFilesConfig

__all__ = ["VFilesConfig"]
