from typing import List, Literal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from directory_app.categories import CategoryRegistry
from directory_app.dependencies import (
    get_acting_session,
    get_category_registry,
    get_gateway,
    get_store,
)
from directory_app.schemas.entry import (
    CategoryResponse,
    EntryBase,
    EntryCreate,
    EntryResponse,
    EntryTableResponse,
    EntryUpdate,
)
from directory_app.services.gateway import EntryGateway
from directory_app.session import ActingSession
from directory_app.storage.strategies import EntryStoreStrategy
from directory_app.table.entry_table import build_table_view
from directory_app.table.sorting import SortDirection, SortState

router = APIRouter(prefix="/entries", tags=["entries"])
categories_router = APIRouter(prefix="/categories", tags=["categories"])

ACCEPTED = {"status": "accepted"}


@categories_router.get("/", response_model=List[CategoryResponse])
def list_categories(registry: CategoryRegistry = Depends(get_category_registry)):
    """Selector options for the category field"""
    return [CategoryResponse(id=category.id, name=category.name) for category in registry]


@router.get("/", response_model=EntryTableResponse)
async def list_entries(
    order_by: Literal["name", "hits"] = "hits",
    order: SortDirection = SortDirection.DESC,
    store: EntryStoreStrategy = Depends(get_store),
    registry: CategoryRegistry = Depends(get_category_registry),
    session: ActingSession = Depends(get_acting_session),
):
    """Sorted table view (only the session's entries when X-User-Id is sent)"""
    entries = await store.list_entries(userid=session.uid)
    return build_table_view(entries, SortState(order_by=order_by, direction=order), registry)


@router.get("/{entry_id}", response_model=EntryResponse)
async def get_entry(entry_id: str, store: EntryStoreStrategy = Depends(get_store)):
    entry = await store.get(entry_id)
    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Entry not found"
        )
    return entry


def _require_known_category(category: int, registry: CategoryRegistry):
    if category not in registry:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown category id: {category}"
        )


@router.post("/", status_code=status.HTTP_202_ACCEPTED)
async def create_entry(
    entry_data: EntryBase,
    background_tasks: BackgroundTasks,
    gateway: EntryGateway = Depends(get_gateway),
    session: ActingSession = Depends(get_acting_session),
    registry: CategoryRegistry = Depends(get_category_registry),
):
    """
    Create an entry (fire-and-forget).

    The store call runs after the response is sent; failures only reach
    the diagnostics channel. The category must exist in the registry.
    """
    _require_known_category(entry_data.category, registry)
    fields = EntryCreate(
        **entry_data.model_dump(),
        user=session.attribution_name,
        userid=session.uid,
    )
    background_tasks.add_task(gateway.create, fields)
    return ACCEPTED


@router.patch("/{entry_id}", status_code=status.HTTP_202_ACCEPTED)
async def update_entry(
    entry_id: str,
    entry_data: EntryUpdate,
    background_tasks: BackgroundTasks,
    gateway: EntryGateway = Depends(get_gateway),
    registry: CategoryRegistry = Depends(get_category_registry),
):
    """Update any of name, link, description and category (fire-and-forget)"""
    sent = entry_data.model_dump(exclude_unset=True)
    if "category" in sent:
        _require_known_category(entry_data.category, registry)
    background_tasks.add_task(gateway.update_fields, entry_id, EntryUpdate(**sent))
    return ACCEPTED


@router.delete("/{entry_id}", status_code=status.HTTP_202_ACCEPTED)
async def delete_entry(
    entry_id: str,
    background_tasks: BackgroundTasks,
    gateway: EntryGateway = Depends(get_gateway),
):
    """Delete permanently (fire-and-forget). Confirmation is the client's job."""
    background_tasks.add_task(gateway.delete_by_id, entry_id)
    return ACCEPTED
