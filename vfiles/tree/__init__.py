"""
Tree Operations

Modules:
    operations: TreeOperations (move, delete, recursive post-order delete)
"""

from vfiles.tree.operations import TreeOperations

__all__ = ["TreeOperations"]
