"""
Editor and UI Collaborators

Modules:
    collaborators: EditorCollaborator / UICollaborator protocols
    state: In-memory default implementations (EditorState, UIState)
"""

from vfiles.editor.collaborators import EditorCollaborator, UICollaborator
from vfiles.editor.state import DEFAULT_EDITOR, EXPLORER_PANEL, EditorState, UIState

__all__ = [
    "EditorCollaborator",
    "UICollaborator",
    "EditorState",
    "UIState",
    "DEFAULT_EDITOR",
    "EXPLORER_PANEL",
]
