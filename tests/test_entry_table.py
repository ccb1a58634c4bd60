"""
Tests for the sorted entry table component.
"""

import asyncio

from directory_app.editor.dialog import DialogMode, DialogState
from directory_app.schemas.entry import EntryCreate
from directory_app.services.gateway import EntryGateway
from directory_app.table.entry_table import EntryTable
from directory_app.table.sorting import SortDirection

from test_gateway import BrokenStore, RecordingStore


class Browser:
    """Records navigations"""

    def __init__(self):
        self.opened = []

    def __call__(self, url):
        self.opened.append(url)


def names(rows):
    return [r.name for r in rows]


class TestRendering:
    def test_rows_sorted_by_hits_descending_by_default(self, gateway, registry, make_entry):
        entries = [
            make_entry(name="low", hits=1),
            make_entry(name="high", hits=9, category=3),
            make_entry(name="mid", hits=4, category=42),
        ]
        table = EntryTable(entries, gateway=gateway, registry=registry)

        rows = table.rows()

        assert names(rows) == ["high", "mid", "low"]
        assert rows[0].category_name == "Community"
        assert rows[1].category_name == "unknown"
        assert rows[0].href == "https://example.com"

    def test_header_clicks_resort_without_touching_snapshot(self, gateway, registry, make_entry):
        entries = [make_entry(name="b", hits=1), make_entry(name="a", hits=2), make_entry(name="c", hits=3)]
        table = EntryTable(entries, gateway=gateway, registry=registry)

        assert table.click_header("name") is True
        assert names(table.rows()) == ["a", "b", "c"]
        table.click_header("name")
        assert names(table.rows()) == ["c", "b", "a"]
        assert table.click_header("link") is False
        assert names(table.rows()) == ["c", "b", "a"]
        table.click_header("hits")
        assert table.sort.direction is SortDirection.ASC
        assert names(table.rows()) == ["b", "a", "c"]

        assert tuple(entries) == table.entries

    def test_view_marks_active_column(self, gateway, registry, make_entry):
        table = EntryTable([make_entry(hits=1)], gateway=gateway, registry=registry)
        view = table.view()

        assert view.order_by == "hits"
        assert view.order == "desc"
        assert view.sort_label == "sorted descending"
        active = [c.id for c in view.columns if c.active]
        assert active == ["hits"]
        assert [c.id for c in view.columns if c.sortable] == ["name", "hits"]


class TestHitActivation:
    def test_one_navigation_and_one_increment(self, diagnostics_queue, registry):
        store = RecordingStore()
        gateway = EntryGateway(store=store, diagnostics=diagnostics_queue, atomic_hit_increment=False)
        entry_id = asyncio.run(store.create(
            EntryCreate(name="Blog", link="blog.example.com", user="Ada", userid="u1")
        ))
        asyncio.run(store.set_hits(entry_id, 5))
        entry = asyncio.run(store.get(entry_id))
        store.calls.clear()
        browser = Browser()
        table = EntryTable([entry], gateway=gateway, registry=registry, navigate=browser)

        async def scenario():
            task = table.activate_link(entry_id)
            await task

        asyncio.run(scenario())

        assert browser.opened == ["https://blog.example.com"]
        assert store.calls == [("set_hits", entry_id, 6)]
        # No optimistic update of the rendered count
        assert table.rows()[0].hits == 5

    def test_failed_increment_does_not_block_navigation(self, diagnostics_queue, registry, make_entry):
        entry = make_entry(link="https://status.example.com", hits=2)
        gateway = EntryGateway(store=BrokenStore(), diagnostics=diagnostics_queue)
        browser = Browser()
        table = EntryTable([entry], gateway=gateway, registry=registry, navigate=browser)

        async def scenario():
            return await table.activate_link(entry.id)

        assert asyncio.run(scenario()) is False
        assert browser.opened == ["https://status.example.com"]
        [failure] = asyncio.run(diagnostics_queue.consume("store_failures", batch_size=10))
        assert failure.operation == "increment_hits"


class TestRowDialogs:
    def test_each_row_has_its_own_dialog(self, gateway, registry, make_entry):
        first, second = make_entry(name="one"), make_entry(name="two")
        table = EntryTable([first, second], gateway=gateway, registry=registry)

        dialog_one = table.dialog_for(first.id)
        dialog_two = table.dialog_for(second.id)
        assert dialog_one is not dialog_two
        assert dialog_one is table.dialog_for(first.id)
        assert dialog_one.mode is DialogMode.EDIT

        dialog_one.open()
        dialog_one.begin_edit()
        dialog_one.set_field("name", "changed")
        dialog_two.open()

        assert dialog_two.state is DialogState.READ_ONLY
        assert dialog_two.draft.name == "two"

    def test_replace_entries_refreshes_and_prunes_dialogs(self, gateway, registry, make_entry):
        first, second = make_entry(name="one"), make_entry(name="two")
        table = EntryTable([first, second], gateway=gateway, registry=registry)
        dialog_one = table.dialog_for(first.id)
        table.dialog_for(second.id)

        table.replace_entries([first.model_copy(update={"name": "uno"})])

        assert table.dialog_for(first.id) is dialog_one
        dialog_one.open()
        assert dialog_one.draft.name == "uno"
        assert names(table.rows()) == ["uno"]
        assert second.id not in table._dialogs
