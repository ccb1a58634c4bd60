from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from fastapi.responses import RedirectResponse
from directory_app.dependencies import get_gateway, get_store
from directory_app.links import normalize_link
from directory_app.services.gateway import EntryGateway
from directory_app.storage.strategies import EntryStoreStrategy

router = APIRouter(tags=["redirect"])


@router.get("/go/{entry_id}")
async def open_entry_link(
    entry_id: str,
    background_tasks: BackgroundTasks,
    store: EntryStoreStrategy = Depends(get_store),
    gateway: EntryGateway = Depends(get_gateway),
):
    """
    Hit activation: redirect to the entry's link and record one hit.

    Flow:
    1. Look up the entry snapshot
    2. Schedule increment_hits(id, hits) as a background task
    3. Redirect to the normalized link

    The increment runs after the redirect is sent; if it fails the redirect
    still stands and the failure goes to diagnostics.
    """
    entry = await store.get(entry_id)

    if not entry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Entry not found"
        )

    background_tasks.add_task(gateway.increment_hits, entry.id, entry.hits)

    return RedirectResponse(url=normalize_link(entry.link), status_code=status.HTTP_302_FOUND)
