"""
Data models for diagnostics channel messages.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StoreFailure(BaseModel):
    """
    Event published when the entry store rejects an operation.

    The gateway publishes one of these for every failed create, update,
    increment or delete; the diagnostics worker logs them.
    """

    operation: str = Field(..., description="Gateway verb that failed")
    entry_id: Optional[str] = Field(None, description="Target entry (None for create)")
    error: str = Field(..., description="Error message")
    error_type: str = Field("StoreOperationError", description="Exception class name")
    timestamp: datetime = Field(default_factory=_utcnow, description="When the failure happened")

    # Set by backends that need acknowledgment (Redis Streams)
    message_id: Optional[str] = Field(None, exclude=True)

    model_config = {
        "json_schema_extra": {
            "example": {
                "operation": "increment_hits",
                "entry_id": "3f2c9a0e5b5e4a8c9d7f1e2b3c4d5e6f",
                "error": "increment_hits(3f2c9a0e5b5e4a8c9d7f1e2b3c4d5e6f): entry not found",
                "error_type": "EntryNotFoundError",
                "timestamp": "2025-10-29T10:30:00Z",
            }
        }
    }
