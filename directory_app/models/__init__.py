"""
Database models for the SQL entry store backend.

Other backends (Redis, in-memory) keep plain documents and share the
pydantic schemas in ``directory_app.schemas.entry`` instead.
"""

from .entry import Entry

__all__ = ["Entry"]
