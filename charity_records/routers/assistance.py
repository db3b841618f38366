from fastapi import APIRouter, Depends

from charity_records import crud
from charity_records.auth import get_store, require_user
from charity_records.schemas import AssistanceTypeIn, IdList, User
from charity_records.store import DocumentStore

router = APIRouter(prefix="/assistance-types")


@router.get("")
async def list_assistance_types(store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    return store.document.assistance_types


@router.post("", status_code=201)
async def add_assistance_type(
    data: AssistanceTypeIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    document, assistance = crud.add_assistance_type(store.document, data.name)
    store.commit(document)
    return assistance


@router.put("/{type_id}")
async def rename_assistance_type(
    type_id: int,
    data: AssistanceTypeIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.rename_assistance_type(store.document, type_id, data.name))
    return store.document.get_assistance_type(type_id)


@router.delete("/{type_id}")
async def delete_assistance_type(type_id: int, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    store.commit(crud.delete_assistance_types(store.document, [type_id]))
    return {"deleted": [type_id]}


@router.post("/delete")
async def bulk_delete_assistance_types(
    data: IdList,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.delete_assistance_types(store.document, data.ids))
    return {"deleted": data.ids}
