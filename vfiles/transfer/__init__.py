"""
Import / Export

Modules:
    serializer: TreeSerializer (export snapshot, merge-restore, JSON backups)
"""

from vfiles.transfer.serializer import RestoreInput, TreeSerializer

__all__ = ["TreeSerializer", "RestoreInput"]
