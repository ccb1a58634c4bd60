import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Text, DateTime
from directory_app.database.connection import Base


def _new_entry_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Entry(Base):
    """
    A single link/bookmark document.

    ``user`` and ``userid`` are stamped at creation from the acting session
    and never rewritten by edits. ``hits`` starts at 0.
    """
    __tablename__ = "entries"

    # Opaque id, assigned here rather than by the caller
    id = Column(String(32), primary_key=True, default=_new_entry_id)
    name = Column(String, nullable=False, default="")
    link = Column(String, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    category = Column(Integer, nullable=False, default=0)
    hits = Column(Integer, nullable=False, default=0)
    user = Column(String, nullable=False, default="")
    userid = Column(String, nullable=True, index=True)
    # Python-side default keeps microseconds so creation order is stable
    created_at = Column(DateTime(timezone=True), default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=_utcnow)
