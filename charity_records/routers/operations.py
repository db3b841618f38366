from typing import Optional

from fastapi import APIRouter, Depends

from charity_records import crud
from charity_records.auth import get_store, require_user
from charity_records.exceptions import RecordNotFound
from charity_records.schemas import IdList, OperationIn, User
from charity_records.services import queries
from charity_records.store import DocumentStore

router = APIRouter(prefix="/operations")


@router.get("")
async def list_operations(
    search: str = "",
    status: str = "",
    start_date: str = "",
    end_date: str = "",
    sort: Optional[str] = None,
    desc: bool = False,
    page: int = 1,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    document = store.document
    items = queries.filter_operations(document, search, status, start_date, end_date)
    items = queries.sort_operations(document, items, sort, desc)
    result = queries.paginate(items, page)
    names = {b.national_id: b.name for b in document.beneficiaries}
    types = {a.id: a.name for a in document.assistance_types}
    result["items"] = [
        {
            **op.model_dump(),
            "beneficiary_name": names.get(op.beneficiary_national_id, ""),
            "assistance_name": types.get(op.assistance_id, ""),
        }
        for op in result["items"]
    ]
    return result


@router.post("", status_code=201)
async def add_operation(data: OperationIn, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    document, operation = crud.add_operation(store.document, data)
    store.commit(document)
    return operation


@router.post("/delete")
async def bulk_delete_operations(
    data: IdList,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.delete_operations(store.document, data.ids))
    return {"deleted": data.ids}


@router.get("/{operation_id}")
async def get_operation(operation_id: int, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    operation = store.document.get_operation(operation_id)
    if operation is None:
        raise RecordNotFound("Operation not found")
    return operation


@router.put("/{operation_id}")
async def edit_operation(
    operation_id: int,
    data: OperationIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    document, operation, corrected = crud.update_operation(store.document, operation_id, data)
    store.commit(document)
    return {"operation": operation, "code_corrected": corrected}


@router.delete("/{operation_id}")
async def delete_operation(operation_id: int, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    if store.document.get_operation(operation_id) is None:
        raise RecordNotFound("Operation not found")
    store.commit(crud.delete_operations(store.document, [operation_id]))
    return {"deleted": [operation_id]}
