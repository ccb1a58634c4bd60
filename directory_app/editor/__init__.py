"""
Entry editor dialog: add/view/edit/delete state machine.
"""

from .dialog import (
    DELETE_PROMPT,
    DialogAction,
    DialogMode,
    DialogState,
    EntryDraft,
    EntryEditorDialog,
)

__all__ = [
    "DELETE_PROMPT",
    "DialogAction",
    "DialogMode",
    "DialogState",
    "EntryDraft",
    "EntryEditorDialog",
]
