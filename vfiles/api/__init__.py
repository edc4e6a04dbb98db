"""
Public API

Modules:
    file_manager: FileManager facade (action surface over registry and store)
"""

from vfiles.api.file_manager import FileManager

__all__ = ["FileManager"]
