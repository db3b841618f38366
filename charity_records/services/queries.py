# charity_records/services/queries.py
"""Read-only views over the document: list filters, sorting, reports."""
import math
from typing import Callable, Dict, List, Optional

from charity_records.config import settings
from charity_records.schemas import Beneficiary, Document, Employee, Operation, User

PAGE_SIZE = 10
VOLUNTEER_LABEL = "Volunteer"
UNKNOWN_EMPLOYEE = "Unknown"

RESEARCH_RANK = {"not_started": 0, "under_research": 1, "awaiting_result": 2, "accepted": 2, "rejected": 2}


def research_status(beneficiary: Beneficiary) -> str:
    if beneficiary.research_submission_date:
        return beneficiary.research_result or "awaiting_result"
    if beneficiary.researcher_receipt_date:
        return "under_research"
    return "not_started"


def employee_name(document: Document, national_id: str) -> str:
    if national_id == settings.VOLUNTEER_NATIONAL_ID:
        return VOLUNTEER_LABEL
    employee = document.get_employee(national_id)
    return employee.name if employee else UNKNOWN_EMPLOYEE


def operation_counts(document: Document) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for op in document.operations:
        counts[op.beneficiary_national_id] = counts.get(op.beneficiary_national_id, 0) + 1
    return counts


def in_range(value: Optional[str], start: Optional[str], end: Optional[str]) -> bool:
    # ISO dates compare correctly as strings
    value = value or ""
    return (not start or value >= start) and (not end or value <= end)


def _sorted(items: list, key: Callable, descending: bool = False) -> list:
    """Sorts by ``key``; items whose key is None go last either way."""
    present = [i for i in items if key(i) is not None]
    missing = [i for i in items if key(i) is None]
    return sorted(present, key=key, reverse=descending) + missing


# --- EMPLOYEES ---

def filter_employees(document: Document, search: str = "") -> List[Employee]:
    term = (search or "").strip().lower()
    employees = [e for e in document.employees if e.national_id != settings.VOLUNTEER_NATIONAL_ID]
    if not term:
        return employees
    return [e for e in employees if term in e.name.lower() or term in e.national_id or term in e.phone]


def sort_employees(employees: List[Employee], key: Optional[str], descending: bool = False) -> List[Employee]:
    if not key or key not in Employee.model_fields:
        return employees
    return _sorted(employees, lambda e: getattr(e, key), descending)


# --- BENEFICIARIES ---

def filter_beneficiaries(
    document: Document,
    governorate: str = "",
    city: str = "",
    search: str = "",
    start_date: str = "",
    end_date: str = "",
) -> List[Beneficiary]:
    term = (search or "").strip().lower()

    def matches(ben: Beneficiary) -> bool:
        if governorate and ben.governorate != governorate:
            return False
        if city and ben.city != city:
            return False
        if term and not (
            term in ben.name.lower() or term in ben.national_id or term in ben.phone or term in ben.code.lower()
        ):
            return False
        return in_range(ben.join_date, start_date, end_date)

    return [b for b in document.beneficiaries if matches(b)]


def sort_beneficiaries(
    document: Document, beneficiaries: List[Beneficiary], key: Optional[str], descending: bool = False
) -> List[Beneficiary]:
    """
    Sorts by any beneficiary field, or by one of the derived columns
    operationsCount, employeeName and researchStatus.
    """
    if key == "operationsCount":
        counts = operation_counts(document)
        return _sorted(beneficiaries, lambda b: counts.get(b.national_id, 0), descending)
    if key == "employeeName":
        return _sorted(beneficiaries, lambda b: employee_name(document, b.employee_national_id), descending)
    if key == "researchStatus":
        return _sorted(beneficiaries, lambda b: RESEARCH_RANK[research_status(b)], descending)
    if key in Beneficiary.model_fields and key != "notes":
        return _sorted(beneficiaries, lambda b: getattr(b, key), descending)
    return beneficiaries


def beneficiary_summary(document: Document, beneficiary: Beneficiary) -> dict:
    operations = [o for o in document.operations if o.beneficiary_national_id == beneficiary.national_id]
    disbursed = sum(o.amount for o in operations if o.status == "accepted" and o.disbursement_status == "disbursed")
    return {
        "beneficiary": beneficiary,
        "operations": operations,
        "operations_count": len(operations),
        "total_disbursed": disbursed,
        "employee_name": employee_name(document, beneficiary.employee_national_id),
        "research_status": research_status(beneficiary),
    }


# --- OPERATIONS ---

def filter_operations(
    document: Document, search: str = "", status: str = "", start_date: str = "", end_date: str = ""
) -> List[Operation]:
    term = (search or "").strip().lower()
    names = {b.national_id: b.name.lower() for b in document.beneficiaries}

    def matches(op: Operation) -> bool:
        if term and not (
            term in names.get(op.beneficiary_national_id, "")
            or term in op.beneficiary_national_id
            or term in op.code.lower()
        ):
            return False
        if status and op.status != status:
            return False
        return in_range(op.date, start_date, end_date)

    return [o for o in document.operations if matches(o)]


def sort_operations(
    document: Document, operations: List[Operation], key: Optional[str], descending: bool = False
) -> List[Operation]:
    if key == "beneficiaryName":
        names = {b.national_id: b.name for b in document.beneficiaries}
        return _sorted(operations, lambda o: names.get(o.beneficiary_national_id, ""), descending)
    if key in Operation.model_fields:
        return _sorted(operations, lambda o: getattr(o, key), descending)
    return operations


# --- PAGINATION & SEARCH ---

def paginate(items: list, page: int = 1, page_size: int = PAGE_SIZE) -> dict:
    total_pages = max(1, math.ceil(len(items) / page_size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * page_size
    return {
        "items": items[start:start + page_size],
        "page": page,
        "total_pages": total_pages,
        "total": len(items),
    }


def search(document: Document, term: str, by: str = "beneficiary") -> List[Beneficiary]:
    """
    by="beneficiary": name, national id, phone or code.
    by="employee": beneficiaries of employees matching name or phone.
    """
    term = (term or "").strip().lower()
    if not term:
        return []
    if by == "employee":
        ids = {e.national_id for e in document.employees if term in e.name.lower() or term in e.phone}
        return [b for b in document.beneficiaries if b.employee_national_id in ids]
    return filter_beneficiaries(document, search=term)


# --- DASHBOARD & REPORTS ---

def user_tasks(document: Document, user: User) -> list:
    """The user's tasks, open ones first, newest first within each group."""
    tasks = [t for t in document.tasks if t.user_id == user.id]
    tasks = sorted(tasks, key=lambda t: t.created_at, reverse=True)
    return sorted(tasks, key=lambda t: t.is_completed)


def dashboard(document: Document, user: User) -> dict:
    return {
        "employees": len(filter_employees(document)),
        "beneficiaries": len(document.beneficiaries),
        "operations": len(document.operations),
        "tasks": user_tasks(document, user),
    }


def incentive_report(
    document: Document,
    employee_id: str,
    start_date: str = "",
    end_date: str = "",
    classifications: Optional[Dict[str, str]] = None,
) -> dict:
    """
    Beneficiaries whose research the employee submitted inside the period,
    with internal/external counts taken from the caller's classification of
    each beneficiary.
    """
    classifications = classifications or {}
    results = [
        b for b in document.beneficiaries
        if b.employee_national_id == employee_id
        and b.research_submission_date
        and in_range(b.research_submission_date, start_date, end_date)
    ]
    result_ids = {b.national_id for b in results}
    kinds = [kind for nid, kind in classifications.items() if nid in result_ids]
    employee = document.get_employee(employee_id)
    return {
        "employee_name": employee.name if employee else UNKNOWN_EMPLOYEE,
        "start_date": start_date,
        "end_date": end_date,
        "beneficiaries": results,
        "internal_count": kinds.count("internal"),
        "external_count": kinds.count("external"),
        "total": len(results),
    }
