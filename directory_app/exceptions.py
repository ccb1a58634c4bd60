"""
Exceptions raised by the link directory.

Store errors are only ever caught at the gateway call sites (see
``directory_app.services.gateway``) and routed to the diagnostics channel.
Dialog errors signal programming mistakes and propagate.
"""

from typing import Optional


class DirectoryError(Exception):
    """Base class for all link directory errors"""


class StoreOperationError(DirectoryError):
    """
    The entry store rejected an operation.

    Covers network, permission and validation failures alike; no
    distinction is made between transient and permanent failures.
    """

    def __init__(self, operation: str, entry_id: Optional[str] = None, message: str = ""):
        self.operation = operation
        self.entry_id = entry_id
        detail = message or "store operation rejected"
        if entry_id:
            super().__init__(f"{operation}({entry_id}): {detail}")
        else:
            super().__init__(f"{operation}: {detail}")


class EntryNotFoundError(StoreOperationError):
    """No entry with the given id exists in the store"""

    def __init__(self, operation: str, entry_id: str):
        super().__init__(operation, entry_id, "entry not found")


class InvalidTransitionError(DirectoryError):
    """A dialog event is not allowed in the dialog's current state"""


class ReadOnlyFieldError(DirectoryError):
    """A draft field was edited while the dialog is not editable"""
