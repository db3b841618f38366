# charity_records/routers/settings.py
from fastapi import APIRouter, Depends

from charity_records import crud
from charity_records.auth import get_store, require_manager
from charity_records.schemas import OrganizationIn, User
from charity_records.store import DocumentStore

router = APIRouter()


def _organization(store: DocumentStore) -> dict:
    return {"name": store.document.organization_name, "logo": store.document.organization_logo}


# Shown on the login screen, so no session is needed
@router.get("/settings/organization")
async def get_organization(store: DocumentStore = Depends(get_store)):
    return _organization(store)


@router.put("/settings/organization")
async def update_organization(
    data: OrganizationIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    store.commit(crud.update_organization(store.document, data.name, data.logo))
    return _organization(store)
