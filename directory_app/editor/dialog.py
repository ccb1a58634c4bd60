"""
Entry editor dialog.

One component serves two modes:

- add:  opening shows a blank, editable form; "Add Entry" creates.
- edit: opening shows the entry read-only; "Edit" unlocks the form,
        "Confirm" updates, "Delete" removes after a confirmation prompt.

Each instance owns its draft. Nothing reaches the store until the user
confirms, and the draft is discarded whenever the dialog closes. Store
calls are fired through the gateway without waiting for them, so actions
must run inside an event loop.
"""

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, List, Optional

from directory_app.categories import CategoryRegistry
from directory_app.exceptions import InvalidTransitionError, ReadOnlyFieldError
from directory_app.schemas.entry import EntryCreate, EntryResponse, EntryUpdate
from directory_app.services.gateway import EntryGateway
from directory_app.session import ActingSession

DELETE_PROMPT = "Are you sure you want to delete?"

# Free-text fields; category goes through select_category, hits is never edited
TEXT_FIELDS = ("name", "link", "description")

ConfirmPrompt = Callable[[str], bool]


class DialogMode(str, Enum):
    ADD = "add"
    EDIT = "edit"


class DialogState(str, Enum):
    CLOSED = "closed"
    READ_ONLY = "read_only"
    EDITABLE = "editable"


class DialogAction(str, Enum):
    CANCEL = "Cancel"
    ADD_ENTRY = "Add Entry"
    EDIT = "Edit"
    CONFIRM = "Confirm"
    DELETE = "Delete"


@dataclass(frozen=True)
class EntryDraft:
    """Uncommitted form values of an open dialog"""

    name: str = ""
    link: str = ""
    description: str = ""
    category: int = 0
    # Carried through from the snapshot, never edited
    hits: int = 0

    @classmethod
    def blank(cls) -> "EntryDraft":
        return cls()

    @classmethod
    def from_entry(cls, entry: EntryResponse) -> "EntryDraft":
        return cls(
            name=entry.name,
            link=entry.link,
            description=entry.description,
            category=entry.category,
            hits=entry.hits,
        )

    def to_create(self, session: ActingSession) -> EntryCreate:
        # hits is dropped here; the store starts every entry at 0
        return EntryCreate(
            name=self.name,
            link=self.link,
            description=self.description,
            category=self.category,
            user=session.attribution_name,
            userid=session.uid,
        )

    def to_update(self) -> EntryUpdate:
        return EntryUpdate(
            name=self.name,
            link=self.link,
            description=self.description,
            category=self.category,
        )


def _decline(message: str) -> bool:
    return False


class EntryEditorDialog:
    """Add/view/edit/delete state machine for a single entry"""

    def __init__(
        self,
        mode: DialogMode,
        gateway: EntryGateway,
        registry: CategoryRegistry,
        session: Optional[ActingSession] = None,
        entry: Optional[EntryResponse] = None,
        confirm: Optional[ConfirmPrompt] = None,
    ):
        """
        Args:
            mode: add or edit
            gateway: Store gateway the actions dispatch to
            registry: Categories offered by the selector
            session: Acting user, stamped on created entries
            entry: Snapshot to show in edit mode (required there)
            confirm: Synchronous yes/no prompt used before deleting;
                declines everything if not given
        """
        mode = DialogMode(mode)
        if mode is DialogMode.EDIT and entry is None:
            raise ValueError("Edit dialog needs an entry")

        self.mode = mode
        self.gateway = gateway
        self.registry = registry
        self.session = session or ActingSession()
        self.entry = entry
        self.confirm_prompt = confirm or _decline

        self.state = DialogState.CLOSED
        self.draft: Optional[EntryDraft] = None
        # Snapshot taken at open time; its id is what update/delete target
        self._original: Optional[EntryResponse] = None

    # State

    @property
    def is_open(self) -> bool:
        return self.state is not DialogState.CLOSED

    @property
    def read_only(self) -> bool:
        return self.state is not DialogState.EDITABLE

    @property
    def title(self) -> str:
        if self.mode is DialogMode.ADD:
            return "Add Entry"
        return self.draft.name if self.draft else self.entry.name

    @property
    def open_label(self) -> str:
        return "Add entry" if self.mode is DialogMode.ADD else "Open"

    @property
    def actions(self) -> List[DialogAction]:
        """Buttons shown for the current state"""
        if self.state is DialogState.CLOSED:
            return []
        if self.mode is DialogMode.ADD:
            return [DialogAction.CANCEL, DialogAction.ADD_ENTRY]
        if self.state is DialogState.READ_ONLY:
            return [DialogAction.CANCEL, DialogAction.DELETE, DialogAction.EDIT]
        return [DialogAction.CANCEL, DialogAction.DELETE, DialogAction.CONFIRM]

    # Transitions

    def open(self):
        """Show the dialog with a fresh draft from the current snapshot"""
        self._require(self.state is DialogState.CLOSED, "open")
        if self.mode is DialogMode.ADD:
            self._original = None
            self.draft = EntryDraft.blank()
            self.state = DialogState.EDITABLE
        else:
            self._original = self.entry
            self.draft = EntryDraft.from_entry(self.entry)
            self.state = DialogState.READ_ONLY

    def begin_edit(self):
        """The "Edit" button: unlock the fields, keeping the draft"""
        self._require(
            self.mode is DialogMode.EDIT and self.state is DialogState.READ_ONLY, "edit"
        )
        self.state = DialogState.EDITABLE

    def cancel(self):
        """Close and discard the draft"""
        self._require(self.is_open, "cancel")
        self._close()

    def set_field(self, field: str, value: str):
        if field not in TEXT_FIELDS:
            raise ValueError(f"Not an editable text field: {field}")
        self._require_editable(field)
        self.draft = replace(self.draft, **{field: value})

    def select_category(self, category_id: int):
        self._require_editable("category")
        if category_id not in self.registry:
            raise ValueError(f"Unknown category id: {category_id}")
        self.draft = replace(self.draft, category=category_id)

    def submit(self) -> asyncio.Task:
        """The "Add Entry" button: create from the draft and close"""
        self._require(
            self.mode is DialogMode.ADD and self.state is DialogState.EDITABLE, "add"
        )
        task = self.gateway.fire(self.gateway.create(self.draft.to_create(self.session)))
        self._close()
        return task

    def confirm(self) -> asyncio.Task:
        """The "Confirm" button: update the original entry and close"""
        self._require(
            self.mode is DialogMode.EDIT and self.state is DialogState.EDITABLE, "confirm"
        )
        task = self.gateway.fire(
            self.gateway.update_fields(self._original.id, self.draft.to_update())
        )
        self._close()
        return task

    def request_delete(self) -> Optional[asyncio.Task]:
        """
        The "Delete" button.

        Returns:
            The fired delete, or None if the prompt was declined (in which
            case nothing changes)
        """
        self._require(self.mode is DialogMode.EDIT and self.is_open, "delete")
        if not self.confirm_prompt(DELETE_PROMPT):
            return None
        task = self.gateway.fire(self.gateway.delete_by_id(self._original.id))
        self._close()
        return task

    def _close(self):
        self.state = DialogState.CLOSED
        self.draft = None
        self._original = None

    def _require(self, allowed: bool, event: str):
        if not allowed:
            raise InvalidTransitionError(
                f"Cannot {event} a {self.mode.value} dialog in state {self.state.value}"
            )

    def _require_editable(self, field: str):
        if self.state is not DialogState.EDITABLE:
            raise ReadOnlyFieldError(f"Field {field} is read-only in state {self.state.value}")
