"""
Sorted entry table.

Renders a snapshot of entries in the active sort order, with one edit
dialog per row. The snapshot belongs to whoever loads entries: the table
never changes it after a write and expects a fresh list through
replace_entries() instead. Hit counts are therefore not bumped locally
when a link is opened.
"""

import asyncio
from typing import Callable, Dict, List, Optional, Sequence

from directory_app.categories import CategoryRegistry
from directory_app.editor.dialog import ConfirmPrompt, DialogMode, EntryEditorDialog
from directory_app.links import normalize_link
from directory_app.schemas.entry import EntryResponse, EntryRow, EntryTableResponse, HeadCellResponse
from directory_app.services.gateway import EntryGateway
from directory_app.session import ActingSession
from directory_app.table.sorting import HEAD_CELLS, SortState

Navigate = Callable[[str], None]


def _no_navigation(url: str) -> None:
    pass


def build_row(entry: EntryResponse, registry: CategoryRegistry) -> EntryRow:
    return EntryRow(
        id=entry.id,
        name=entry.name,
        link=entry.link,
        href=normalize_link(entry.link),
        category=entry.category,
        category_name=registry.by_id(entry.category),
        hits=entry.hits,
        description=entry.description,
    )


def build_table_view(
    entries: Sequence[EntryResponse],
    sort: SortState,
    registry: CategoryRegistry,
) -> EntryTableResponse:
    """Serializable view of a sorted table (used by the HTTP API)"""
    columns = [
        HeadCellResponse(
            id=cell.id,
            label=cell.label,
            numeric=cell.numeric,
            sortable=cell.sortable,
            align=cell.align,
            active=cell.id == sort.order_by,
            direction=sort.direction.value if cell.id == sort.order_by else None,
        )
        for cell in HEAD_CELLS
    ]
    return EntryTableResponse(
        order_by=sort.order_by,
        order=sort.direction.value,
        sort_label=sort.label,
        columns=columns,
        rows=[build_row(entry, registry) for entry in sort.apply(entries)],
    )


class EntryTable:
    """Sortable table of entries with per-row edit dialogs"""

    def __init__(
        self,
        entries: Sequence[EntryResponse],
        gateway: EntryGateway,
        registry: CategoryRegistry,
        session: Optional[ActingSession] = None,
        confirm: Optional[ConfirmPrompt] = None,
        navigate: Optional[Navigate] = None,
        sort: Optional[SortState] = None,
    ):
        """
        Args:
            entries: Snapshot to render, owned by the caller
            gateway: Store gateway for hits and dialog actions
            registry: Category names for the category column
            session: Acting user handed to row dialogs
            confirm: Delete confirmation prompt handed to row dialogs
            navigate: Opens a URL in a new tab/context
            sort: Initial sort (hits, descending by default)
        """
        self.gateway = gateway
        self.registry = registry
        self.session = session or ActingSession()
        self.confirm = confirm
        self.navigate = navigate or _no_navigation
        self.sort = sort or SortState()
        self._entries: tuple = tuple(entries)
        self._dialogs: Dict[str, EntryEditorDialog] = {}

    @property
    def entries(self) -> tuple:
        return self._entries

    def replace_entries(self, entries: Sequence[EntryResponse]):
        """Swap in a fresh snapshot; dialogs of vanished rows are dropped"""
        self._entries = tuple(entries)
        by_id = {entry.id: entry for entry in self._entries}
        for entry_id in list(self._dialogs):
            if entry_id in by_id:
                # Picked up on the dialog's next open
                self._dialogs[entry_id].entry = by_id[entry_id]
            else:
                del self._dialogs[entry_id]

    def click_header(self, column: str) -> bool:
        """Header click; returns False for non-sortable columns"""
        return self.sort.request_sort(column)

    def sorted_entries(self) -> List[EntryResponse]:
        return self.sort.apply(self._entries)

    def rows(self) -> List[EntryRow]:
        return [build_row(entry, self.registry) for entry in self.sorted_entries()]

    def view(self) -> EntryTableResponse:
        return build_table_view(self._entries, self.sort, self.registry)

    def dialog_for(self, entry_id: str) -> EntryEditorDialog:
        """The row's own edit dialog, created on first use"""
        dialog = self._dialogs.get(entry_id)
        if dialog is None:
            dialog = EntryEditorDialog(
                DialogMode.EDIT,
                gateway=self.gateway,
                registry=self.registry,
                session=self.session,
                entry=self._find(entry_id),
                confirm=self.confirm,
            )
            self._dialogs[entry_id] = dialog
        return dialog

    def activate_link(self, entry_id: str) -> asyncio.Task:
        """
        Open a row's link and record the hit.

        Navigation happens first and unconditionally; the increment is fired
        against the snapshot's hit count and not awaited.
        """
        entry = self._find(entry_id)
        self.navigate(normalize_link(entry.link))
        return self.gateway.fire(self.gateway.increment_hits(entry.id, entry.hits))

    def _find(self, entry_id: str) -> EntryResponse:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(entry_id)
