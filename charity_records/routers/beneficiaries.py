from typing import Optional

from fastapi import APIRouter, Depends

from charity_records import crud
from charity_records.auth import get_store, require_user
from charity_records.exceptions import RecordNotFound
from charity_records.schemas import BeneficiaryIn, BlacklistRequest, NoteIn, User
from charity_records.services import queries
from charity_records.store import DocumentStore

router = APIRouter(prefix="/beneficiaries")


def _row(store: DocumentStore, beneficiary, counts) -> dict:
    row = beneficiary.model_dump()
    row["operations_count"] = counts.get(beneficiary.national_id, 0)
    row["employee_name"] = queries.employee_name(store.document, beneficiary.employee_national_id)
    row["research_status"] = queries.research_status(beneficiary)
    return row


@router.get("")
async def list_beneficiaries(
    governorate: str = "",
    city: str = "",
    search: str = "",
    start_date: str = "",
    end_date: str = "",
    sort: Optional[str] = None,
    desc: bool = False,
    page: int = 1,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    document = store.document
    items = queries.filter_beneficiaries(document, governorate, city, search, start_date, end_date)
    items = queries.sort_beneficiaries(document, items, sort, desc)
    result = queries.paginate(items, page)
    counts = queries.operation_counts(document)
    result["items"] = [_row(store, b, counts) for b in result["items"]]
    return result


@router.post("", status_code=201)
async def add_beneficiary(data: BeneficiaryIn, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    document, beneficiary = crud.add_beneficiary(store.document, data)
    store.commit(document)
    return beneficiary


@router.post("/blacklist")
async def blacklist_beneficiaries(
    data: BlacklistRequest,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.set_blacklisted(store.document, data.national_ids, data.blacklisted))
    return {"national_ids": data.national_ids, "blacklisted": data.blacklisted}


@router.get("/{national_id}")
async def beneficiary_details(national_id: str, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    beneficiary = store.document.get_beneficiary(national_id)
    if beneficiary is None:
        raise RecordNotFound("Beneficiary not found")
    return queries.beneficiary_summary(store.document, beneficiary)


@router.put("/{national_id}")
async def edit_beneficiary(
    national_id: str,
    data: BeneficiaryIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    document, beneficiary, corrected = crud.update_beneficiary(store.document, national_id, data)
    store.commit(document)
    return {"beneficiary": beneficiary, "code_corrected": corrected}


@router.post("/{national_id}/notes", status_code=201)
async def add_note(
    national_id: str,
    data: NoteIn,
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    store.commit(crud.add_note(store.document, national_id, data.text))
    return store.document.get_beneficiary(national_id).notes
