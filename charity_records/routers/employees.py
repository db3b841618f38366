from typing import Optional

from fastapi import APIRouter, Depends

from charity_records import crud
from charity_records.auth import get_store, require_user
from charity_records.exceptions import RecordNotFound
from charity_records.schemas import EmployeeIn, FreezeRequest, User
from charity_records.services import queries
from charity_records.store import DocumentStore

router = APIRouter(prefix="/employees")


@router.get("")
async def list_employees(
    search: str = "",
    sort: Optional[str] = None,
    desc: bool = False,
    page: int = 1,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    employees = queries.filter_employees(store.document, search)
    employees = queries.sort_employees(employees, sort, desc)
    return queries.paginate(employees, page)


@router.post("", status_code=201)
async def add_employee(data: EmployeeIn, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    store.commit(crud.add_employee(store.document, data))
    return store.document.get_employee(data.national_id.strip())


@router.get("/{national_id}")
async def get_employee(national_id: str, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    employee = store.document.get_employee(national_id)
    if employee is None:
        raise RecordNotFound("Employee not found")
    return employee


@router.put("/{national_id}")
async def edit_employee(
    national_id: str,
    data: EmployeeIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.update_employee(store.document, national_id, data))
    return store.document.get_employee(data.national_id.strip())


@router.post("/freeze")
async def freeze_employees(
    data: FreezeRequest,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.set_employees_frozen(store.document, data.national_ids, data.frozen))
    return {"national_ids": data.national_ids, "frozen": data.frozen}
