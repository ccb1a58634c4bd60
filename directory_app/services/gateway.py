import asyncio
import logging
from typing import Awaitable, Optional, Set

from directory_app.config import settings
from directory_app.diagnostics.models import StoreFailure
from directory_app.diagnostics.strategies import QueueStrategy
from directory_app.schemas.entry import EntryCreate, EntryUpdate
from directory_app.storage.strategies import EntryStoreStrategy

logger = logging.getLogger(__name__)


class EntryGateway:
    """
    The four store verbs the directory depends on: create, update fields,
    increment hits and delete by id.

    Every verb is best-effort. A rejected operation is caught here, logged
    and published to the diagnostics channel; callers only get True/False
    back and are never blocked on the outcome. Verbs are not serialized
    against each other, so an edit followed by a delete may race at the
    store.

    UI handlers dispatch verbs with fire(), which schedules them without
    awaiting. HTTP routes hand them to FastAPI background tasks instead.
    """

    def __init__(
        self,
        store: EntryStoreStrategy,
        diagnostics: Optional[QueueStrategy] = None,
        atomic_hit_increment: Optional[bool] = None,
        diagnostics_queue_name: Optional[str] = None,
    ):
        """
        Args:
            store: Entry store backend
            diagnostics: Channel for StoreFailure events (log only if None)
            atomic_hit_increment: Ask the store to add 1 instead of writing
                hits + 1 (defaults to settings.atomic_hit_increment)
            diagnostics_queue_name: Defaults to settings.diagnostics_queue_name
        """
        self.store = store
        self.diagnostics = diagnostics
        self.atomic_hit_increment = (
            settings.atomic_hit_increment if atomic_hit_increment is None else atomic_hit_increment
        )
        self.diagnostics_queue_name = diagnostics_queue_name or settings.diagnostics_queue_name
        self._in_flight: Set[asyncio.Task] = set()

    async def create(self, fields: EntryCreate) -> bool:
        """Create an entry; the store assigns the id and starts hits at 0"""
        return await self._run("create", None, self.store.create(fields))

    async def update_fields(self, entry_id: str, fields: EntryUpdate) -> bool:
        """Change name, link, description and category of an entry"""
        return await self._run("update_fields", entry_id, self.store.update_fields(entry_id, fields))

    async def increment_hits(self, entry_id: str, current_hits: int) -> bool:
        """
        Record one hit.

        By default writes ``current_hits + 1`` as known by the caller, so two
        concurrent activations of the same stale snapshot count once.
        """
        if self.atomic_hit_increment:
            operation = self.store.add_hit(entry_id)
        else:
            operation = self.store.set_hits(entry_id, current_hits + 1)
        return await self._run("increment_hits", entry_id, operation)

    async def delete_by_id(self, entry_id: str) -> bool:
        """Permanently remove an entry. There is no undo."""
        return await self._run("delete_by_id", entry_id, self.store.delete(entry_id))

    def fire(self, operation: Awaitable[bool]) -> asyncio.Task:
        """
        Schedule a verb without awaiting it.

        Must be called from a running event loop. The task is kept
        referenced until done; callers may ignore it.
        """
        task = asyncio.get_running_loop().create_task(operation)
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    async def drain(self):
        """Wait for every fired verb to finish"""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    async def _run(self, operation: str, entry_id: Optional[str], call: Awaitable) -> bool:
        try:
            await call
            return True
        except Exception as e:
            await self._report(operation, entry_id, e)
            return False

    async def _report(self, operation: str, entry_id: Optional[str], error: Exception):
        logger.warning("Store rejected %s (entry=%s): %s", operation, entry_id or "-", error)
        if self.diagnostics is None:
            return

        failure = StoreFailure(
            operation=operation,
            entry_id=entry_id,
            error=str(error),
            error_type=type(error).__name__,
        )
        try:
            published = await self.diagnostics.publish(self.diagnostics_queue_name, failure)
        except Exception:
            logger.exception("Diagnostics channel raised while publishing %s failure", operation)
            return
        if not published:
            logger.error("Could not publish %s failure to diagnostics channel", operation)
