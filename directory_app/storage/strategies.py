"""
Entry store strategies using Strategy Pattern.

The gateway only needs a handful of verbs from the remote document store,
so any backend that implements them can be plugged in:
- SQL: SQLAlchemy (SQLite for development, any SQL database in production)
- Redis: one hash per entry, insertion order kept in a list
- In-memory: tests and demos
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional
import uuid

from sqlalchemy import select, update, delete
from sqlalchemy.exc import SQLAlchemyError

from directory_app.exceptions import EntryNotFoundError, StoreOperationError
from directory_app.models.entry import Entry
from directory_app.schemas.entry import EntryCreate, EntryUpdate, EntryResponse

# Fields an edit is allowed to touch
UPDATABLE_FIELDS = ("name", "link", "description", "category")


def changed_fields(fields: EntryUpdate) -> dict:
    """Updatable fields the caller actually set; omitted ones keep their stored value"""
    return fields.model_dump(include=set(UPDATABLE_FIELDS), exclude_unset=True)


class EntryStoreStrategy(ABC):
    """
    Abstract base class for entry stores.

    All methods are async because real backends involve I/O. Missing ids
    raise EntryNotFoundError; any other backend failure raises
    StoreOperationError. Callers never see backend-specific exceptions.
    """

    @abstractmethod
    async def list_entries(self, userid: Optional[str] = None) -> List[EntryResponse]:
        """
        List entries in creation order.

        Args:
            userid: Only return entries owned by this id (all if None)
        """
        pass

    @abstractmethod
    async def get(self, entry_id: str) -> Optional[EntryResponse]:
        """Get one entry, or None if it does not exist"""
        pass

    @abstractmethod
    async def create(self, fields: EntryCreate) -> str:
        """
        Create an entry with hits = 0.

        Returns:
            The id assigned by the store
        """
        pass

    @abstractmethod
    async def update_fields(self, entry_id: str, fields: EntryUpdate) -> None:
        """
        Overwrite the fields set on ``fields``.

        Only name, link, description and category are ever written. An
        update that sets none of them still fails for a missing id.
        """
        pass

    @abstractmethod
    async def set_hits(self, entry_id: str, hits: int) -> None:
        """Overwrite the hit counter with a caller-computed value"""
        pass

    @abstractmethod
    async def add_hit(self, entry_id: str) -> None:
        """Add 1 to the hit counter inside the store"""
        pass

    @abstractmethod
    async def delete(self, entry_id: str) -> None:
        """Permanently remove an entry"""
        pass


class SQLEntryStore(EntryStoreStrategy):
    """
    SQLAlchemy implementation.

    Opens a short-lived session per operation so it can be used from
    background tasks that outlive the request that scheduled them.
    """

    def __init__(self, session_factory):
        """
        Args:
            session_factory: Callable returning a new SQLAlchemy Session
        """
        self.session_factory = session_factory

    async def list_entries(self, userid: Optional[str] = None) -> List[EntryResponse]:
        db = self.session_factory()
        try:
            query = select(Entry).order_by(Entry.created_at)
            if userid is not None:
                query = query.where(Entry.userid == userid)
            rows = db.execute(query).scalars().all()
            return [EntryResponse.model_validate(row) for row in rows]
        except SQLAlchemyError as e:
            raise StoreOperationError("list", message=str(e)) from e
        finally:
            db.close()

    async def get(self, entry_id: str) -> Optional[EntryResponse]:
        db = self.session_factory()
        try:
            row = db.get(Entry, entry_id)
            return EntryResponse.model_validate(row) if row else None
        except SQLAlchemyError as e:
            raise StoreOperationError("get", entry_id, str(e)) from e
        finally:
            db.close()

    async def create(self, fields: EntryCreate) -> str:
        db = self.session_factory()
        try:
            entry = Entry(**fields.model_dump(), hits=0)
            db.add(entry)
            db.commit()
            return entry.id
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreOperationError("create", message=str(e)) from e
        finally:
            db.close()

    async def update_fields(self, entry_id: str, fields: EntryUpdate) -> None:
        values = changed_fields(fields)
        if not values:
            if await self.get(entry_id) is None:
                raise EntryNotFoundError("update", entry_id)
            return
        self._execute("update", entry_id, update(Entry).where(Entry.id == entry_id).values(**values))

    async def set_hits(self, entry_id: str, hits: int) -> None:
        self._execute("set_hits", entry_id, update(Entry).where(Entry.id == entry_id).values(hits=hits))

    async def add_hit(self, entry_id: str) -> None:
        # Evaluated by the database, so concurrent hits are not lost
        statement = update(Entry).where(Entry.id == entry_id).values(hits=Entry.hits + 1)
        self._execute("add_hit", entry_id, statement)

    async def delete(self, entry_id: str) -> None:
        self._execute("delete", entry_id, delete(Entry).where(Entry.id == entry_id))

    def _execute(self, operation: str, entry_id: str, statement) -> None:
        """Run a single-row write, raising EntryNotFoundError if nothing matched"""
        db = self.session_factory()
        try:
            result = db.execute(statement)
            if result.rowcount == 0:
                db.rollback()
                raise EntryNotFoundError(operation, entry_id)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreOperationError(operation, entry_id, str(e)) from e
        finally:
            db.close()


class RedisEntryStore(EntryStoreStrategy):
    """
    Redis implementation: each entry is a hash, ids are kept in a list.

    Keys:
    - {prefix}:{id}  -> hash of entry fields
    - {prefix}:ids   -> list of ids in creation order

    Expects a client created with decode_responses=True.
    """

    def __init__(self, redis_client, key_prefix: str = "entries"):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, entry_id: str) -> str:
        return f"{self.key_prefix}:{entry_id}"

    @property
    def _ids_key(self) -> str:
        return f"{self.key_prefix}:ids"

    @staticmethod
    def _to_entry(entry_id: str, data: Dict[str, str]) -> EntryResponse:
        return EntryResponse(
            id=entry_id,
            name=data.get("name", ""),
            link=data.get("link", ""),
            description=data.get("description", ""),
            category=int(data.get("category", 0)),
            hits=int(data.get("hits", 0)),
            user=data.get("user", ""),
            userid=data.get("userid") or None,
        )

    def _require(self, operation: str, entry_id: str) -> None:
        if not self.redis.exists(self._key(entry_id)):
            raise EntryNotFoundError(operation, entry_id)

    async def list_entries(self, userid: Optional[str] = None) -> List[EntryResponse]:
        try:
            entries = []
            for entry_id in self.redis.lrange(self._ids_key, 0, -1):
                data = self.redis.hgetall(self._key(entry_id))
                if not data:
                    continue
                entry = self._to_entry(entry_id, data)
                if userid is None or entry.userid == userid:
                    entries.append(entry)
            return entries
        except Exception as e:
            raise StoreOperationError("list", message=str(e)) from e

    async def get(self, entry_id: str) -> Optional[EntryResponse]:
        try:
            data = self.redis.hgetall(self._key(entry_id))
        except Exception as e:
            raise StoreOperationError("get", entry_id, str(e)) from e
        return self._to_entry(entry_id, data) if data else None

    async def create(self, fields: EntryCreate) -> str:
        entry_id = uuid.uuid4().hex
        mapping = {
            "name": fields.name,
            "link": fields.link,
            "description": fields.description,
            "category": fields.category,
            "hits": 0,
            "user": fields.user,
            "userid": fields.userid or "",
        }
        try:
            # MULTI/EXEC: the hash and its id in the list appear together or not at all
            pipe = self.redis.pipeline(transaction=True)
            pipe.hset(self._key(entry_id), mapping=mapping)
            pipe.rpush(self._ids_key, entry_id)
            pipe.execute()
        except Exception as e:
            raise StoreOperationError("create", entry_id, str(e)) from e
        return entry_id

    async def update_fields(self, entry_id: str, fields: EntryUpdate) -> None:
        try:
            self._require("update", entry_id)
            values = changed_fields(fields)
            if values:
                self.redis.hset(self._key(entry_id), mapping=values)
        except StoreOperationError:
            raise
        except Exception as e:
            raise StoreOperationError("update", entry_id, str(e)) from e

    async def set_hits(self, entry_id: str, hits: int) -> None:
        try:
            self._require("set_hits", entry_id)
            self.redis.hset(self._key(entry_id), "hits", hits)
        except StoreOperationError:
            raise
        except Exception as e:
            raise StoreOperationError("set_hits", entry_id, str(e)) from e

    async def add_hit(self, entry_id: str) -> None:
        try:
            self._require("add_hit", entry_id)
            self.redis.hincrby(self._key(entry_id), "hits", 1)
        except StoreOperationError:
            raise
        except Exception as e:
            raise StoreOperationError("add_hit", entry_id, str(e)) from e

    async def delete(self, entry_id: str) -> None:
        try:
            if not self.redis.delete(self._key(entry_id)):
                raise EntryNotFoundError("delete", entry_id)
            self.redis.lrem(self._ids_key, 0, entry_id)
        except StoreOperationError:
            raise
        except Exception as e:
            raise StoreOperationError("delete", entry_id, str(e)) from e


class InMemoryEntryStore(EntryStoreStrategy):
    """
    In-memory implementation using a plain dict.

    Not persistent and not shared between processes; dicts keep insertion
    order, which doubles as creation order.
    """

    def __init__(self):
        self._entries: Dict[str, EntryResponse] = {}

    def _require(self, operation: str, entry_id: str) -> EntryResponse:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise EntryNotFoundError(operation, entry_id)
        return entry

    async def list_entries(self, userid: Optional[str] = None) -> List[EntryResponse]:
        return [
            entry for entry in self._entries.values()
            if userid is None or entry.userid == userid
        ]

    async def get(self, entry_id: str) -> Optional[EntryResponse]:
        return self._entries.get(entry_id)

    async def create(self, fields: EntryCreate) -> str:
        entry_id = uuid.uuid4().hex
        self._entries[entry_id] = EntryResponse(id=entry_id, hits=0, **fields.model_dump())
        return entry_id

    async def update_fields(self, entry_id: str, fields: EntryUpdate) -> None:
        entry = self._require("update", entry_id)
        self._entries[entry_id] = entry.model_copy(update=changed_fields(fields))

    async def set_hits(self, entry_id: str, hits: int) -> None:
        entry = self._require("set_hits", entry_id)
        self._entries[entry_id] = entry.model_copy(update={"hits": hits})

    async def add_hit(self, entry_id: str) -> None:
        entry = self._require("add_hit", entry_id)
        self._entries[entry_id] = entry.model_copy(update={"hits": entry.hits + 1})

    async def delete(self, entry_id: str) -> None:
        self._require("delete", entry_id)
        del self._entries[entry_id]
