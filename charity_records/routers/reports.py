from fastapi import APIRouter, Depends

from charity_records.auth import get_store, require_user
from charity_records.schemas import IncentiveRequest, User
from charity_records.seed import GOVERNORATES
from charity_records.services import queries
from charity_records.store import DocumentStore

router = APIRouter()


@router.get("/search")
async def search(
    term: str = "",
    by: str = "beneficiary",
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    results = queries.search(store.document, term, by)
    response = {"results": results}
    # A single match opens its details directly
    if len(results) == 1:
        response["details"] = queries.beneficiary_summary(store.document, results[0])
    return response


@router.get("/dashboard")
async def dashboard(store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    stats = queries.dashboard(store.document, user)
    stats["tasks"] = [t.model_dump(by_alias=True) for t in stats["tasks"]]
    stats["organization_name"] = store.document.organization_name
    return stats


@router.post("/incentive")
async def incentive(data: IncentiveRequest, store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    return queries.incentive_report(
        store.document, data.employee_national_id, data.start_date, data.end_date, data.classifications,
    )


@router.get("/meta/governorates")
async def governorates(user: User = Depends(require_user)):
    return GOVERNORATES
