from pydantic import BaseModel, Field, computed_field, ConfigDict
from typing import List, Optional
from directory_app.links import normalize_link


class EntryBase(BaseModel):
    """User-editable fields of an entry. No validation beyond types."""
    name: str = Field("", description="Display name")
    link: str = Field("", description="Link as typed, normalized only when rendered")
    description: str = Field("", description="Free text, may span multiple lines")
    category: int = Field(0, description="Id in the category registry")


class EntryCreate(EntryBase):
    """
    Fields sent to the store on creation.

    There is deliberately no ``hits`` field: the store always starts at 0.
    """
    user: str = Field(..., description="Attribution name of the creating session")
    userid: Optional[str] = Field(None, description="Owner id of the creating session")


class EntryUpdate(EntryBase):
    """
    Fields an edit may change. ``hits``, ``user`` and ``userid`` are never part of it.

    Partial: stores write only the fields that were explicitly set.
    """
    pass


class EntryResponse(EntryBase):
    """Read-only snapshot of a stored entry

    - from_attributes=True reads straight from the SQLAlchemy model
    - href is the normalized, absolute link
    """
    id: str
    hits: int = Field(0, ge=0)
    user: str = ""
    userid: Optional[str] = None

    @computed_field
    @property
    def href(self) -> str:
        return normalize_link(self.link)

    model_config = ConfigDict(from_attributes=True)


class CategoryResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class HeadCellResponse(BaseModel):
    id: str
    label: str
    numeric: bool
    sortable: bool
    align: str
    active: bool = False
    direction: Optional[str] = None


class EntryRow(BaseModel):
    """One rendered table row"""
    id: str
    name: str
    link: str
    href: str
    category: int
    category_name: str
    hits: int
    description: str = ""


class EntryTableResponse(BaseModel):
    order_by: str
    order: str
    sort_label: str
    columns: List[HeadCellResponse]
    rows: List[EntryRow]
