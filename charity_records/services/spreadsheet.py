# charity_records/services/spreadsheet.py
"""Workbook reader/writer for Excel backups and exports.

Cells come back from a workbook untyped, so every field read here goes
through one of the coercion helpers below before it reaches the
reconciler:

    text()        -> str ("" for empty cells)
    number()      -> int/float, None when not a number
    flag()        -> bool
    choice()      -> value from an allow-list, with a fallback
    format_date() -> "YYYY-MM-DD" or ""
"""
import io
import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

import pandas as pd

from charity_records.schemas import (
    AssistanceType, Beneficiary, DISBURSEMENT_STATUSES, Document, Employee, MARITAL_STATUSES,
    OPERATION_STATUSES, Operation, RESEARCH_RESULTS, ROLES, Task, User, translate_label,
)

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

# Bracketed timestamp in front of each note line, always UTC
NOTE_DATE_FORMAT = "%d/%m/%Y %H:%M:%S"
NOTE_LINE = re.compile(r"^\[(.*?)\]\s(.*)$")

EMPLOYEES_SHEET = "Employees"
BENEFICIARIES_SHEET = "Beneficiaries"
ASSISTANCE_SHEET = "AssistanceTypes"
OPERATIONS_SHEET = "Operations"
USERS_SHEET = "Users"
TASKS_SHEET = "Tasks"

# Sheet titles used by workbooks from the Arabic release
SHEET_ALIASES = {
    EMPLOYEES_SHEET: "الموظفين",
    BENEFICIARIES_SHEET: "المستفيدين",
    ASSISTANCE_SHEET: "أنواع المساعدات",
    OPERATIONS_SHEET: "العمليات",
    USERS_SHEET: "المستخدمين",
    TASKS_SHEET: "المهام",
}


# --- CELL COERCION ---

def is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip() == ""


def text(value) -> str:
    if is_blank(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # Numeric-looking ids typed into a cell come back as floats
        return str(int(value))
    return str(value).strip()


def number(value):
    if is_blank(value):
        return None
    if isinstance(value, bool):
        return int(value)
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return int(result) if result.is_integer() else result


def flag(value) -> bool:
    if is_blank(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() not in ("false", "0", "no")
    return bool(value)


def choice(value, allowed: Iterable[str], default=None):
    candidate = translate_label(text(value))
    return candidate if candidate in allowed else default


def format_date(value) -> str:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.strftime("%Y-%m-%d")
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d")
    if isinstance(value, str) and re.match(r"^\d{4}-\d{2}-\d{2}", value):
        return value[:10]
    return ""


# --- NOTES ---

def _parse_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def format_notes(notes) -> str:
    lines = []
    for note in notes:
        try:
            stamp = _parse_iso(note.date).strftime(NOTE_DATE_FORMAT)
        except ValueError:
            logger.warning("Note with unreadable date %r written without timestamp", note.date)
            stamp = note.date
        # One note per line; the reader splits the cell on newlines
        flat = " ".join(note.text.splitlines())
        lines.append(f"[{stamp}] {flat}")
    return "\n".join(lines)


def parse_notes(value) -> List[dict]:
    """
    Turns a notes cell back into [{"text", "date"}].
    Lines whose bracketed timestamp does not parse are dropped.
    """
    if not isinstance(value, str) or not value:
        return []
    notes = []
    for line in value.split("\n"):
        match = NOTE_LINE.match(line.rstrip("\r"))
        if not match or not match.group(1) or not match.group(2):
            continue
        try:
            stamp = datetime.strptime(match.group(1).strip(), NOTE_DATE_FORMAT)
        except ValueError:
            continue
        notes.append({"text": match.group(2), "date": stamp.strftime("%Y-%m-%dT%H:%M:%S.000Z")})
    return notes


# --- WRITING ---

def _columns(model) -> List[str]:
    return [field.alias or name for name, field in model.model_fields.items()]


def _autofit(worksheet):
    # Auto-adjust column width
    for column in worksheet.columns:
        column = [cell for cell in column]
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[column[0].column_letter].width = max_length + 2


def _write_sheets(sheets: Dict[str, pd.DataFrame]) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine='openpyxl') as writer:
        for sheet_name, df in sheets.items():
            df.to_excel(writer, index=False, sheet_name=sheet_name)
            _autofit(writer.sheets[sheet_name])
    return output.getvalue()


def _frame(records, model) -> pd.DataFrame:
    rows = [r.model_dump(by_alias=True) for r in records]
    return pd.DataFrame(rows, columns=_columns(model))


def _beneficiary_rows(beneficiaries) -> List[dict]:
    rows = []
    for ben in beneficiaries:
        row = ben.model_dump()
        row["notes"] = format_notes(ben.notes)
        rows.append(row)
    return rows


def write_backup_workbook(document: Document) -> bytes:
    """Full document as a workbook that restore_from_upload can read back."""
    return _write_sheets({
        EMPLOYEES_SHEET: _frame(document.employees, Employee),
        BENEFICIARIES_SHEET: pd.DataFrame(_beneficiary_rows(document.beneficiaries), columns=_columns(Beneficiary)),
        ASSISTANCE_SHEET: _frame(document.assistance_types, AssistanceType),
        OPERATIONS_SHEET: _frame(document.operations, Operation),
        USERS_SHEET: _frame(document.users, User),
        TASKS_SHEET: _frame(document.tasks, Task),
    })


def write_export_workbook(document: Document, beneficiaries, operations, research_statuses: Dict[str, str]) -> bytes:
    """Reporting workbook. Beneficiaries carry a derived research_status column."""
    rows = _beneficiary_rows(beneficiaries)
    for row in rows:
        row["research_status"] = research_statuses.get(row["national_id"], "")
    return _write_sheets({
        EMPLOYEES_SHEET: _frame(document.employees, Employee),
        BENEFICIARIES_SHEET: pd.DataFrame(rows, columns=_columns(Beneficiary) + ["research_status"]),
        ASSISTANCE_SHEET: _frame(document.assistance_types, AssistanceType),
        OPERATIONS_SHEET: _frame(operations, Operation),
    })


# --- READING ---

def _records(sheets: Dict[str, pd.DataFrame], name: str) -> Optional[List[dict]]:
    df = sheets.get(name)
    if df is None:
        df = sheets.get(SHEET_ALIASES[name])
    if df is None:
        return None
    df = df.astype(object).where(pd.notna(df), None)
    return df.to_dict(orient="records")


def _employee(row: dict) -> dict:
    return {
        "name": text(row.get("name")),
        "national_id": text(row.get("national_id")),
        "phone": text(row.get("phone")),
        "governorate": text(row.get("governorate")),
        "city": text(row.get("city")),
        "area": text(row.get("area")),
        "is_frozen": flag(row.get("is_frozen")),
    }


def _beneficiary(row: dict) -> dict:
    family = number(row.get("family_members"))
    return {
        "code": text(row.get("code")),
        "name": text(row.get("name")),
        "national_id": text(row.get("national_id")),
        "join_date": format_date(row.get("join_date")),
        "phone": text(row.get("phone")),
        "alternative_phone": text(row.get("alternative_phone")),
        "governorate": text(row.get("governorate")),
        "city": text(row.get("city")),
        "area": text(row.get("area")),
        "detailed_address": text(row.get("detailed_address")),
        "job": text(row.get("job")),
        "family_members": int(family) if family else 1,
        "marital_status": choice(row.get("marital_status"), MARITAL_STATUSES, "single"),
        "spouse_name": text(row.get("spouse_name")),
        "employee_national_id": text(row.get("employee_national_id")),
        "is_blacklisted": flag(row.get("is_blacklisted")),
        "notes": parse_notes(row.get("notes")),
        "researcher_receipt_date": format_date(row.get("researcher_receipt_date")),
        "research_submission_date": format_date(row.get("research_submission_date")),
        "research_result": choice(row.get("research_result"), RESEARCH_RESULTS),
    }


def _assistance_type(row: dict) -> dict:
    return {"id": number(row.get("id")), "name": text(row.get("name"))}


def _operation(row: dict) -> dict:
    amount = number(row.get("amount"))
    return {
        "id": number(row.get("id")),
        "code": text(row.get("code")),
        "beneficiary_national_id": text(row.get("beneficiary_national_id")),
        "assistance_id": number(row.get("assistance_id")),
        "amount": amount if amount is not None else 0,
        "date": format_date(row.get("date")),
        "committee_number": text(row.get("committee_number")),
        "committee_decision_description": text(row.get("committee_decision_description")),
        "spending_entity": text(row.get("spending_entity")),
        "details": text(row.get("details")),
        "status": choice(row.get("status"), OPERATION_STATUSES, "pending"),
        "acceptance_date": format_date(row.get("acceptance_date")),
        "pending_date": format_date(row.get("pending_date")),
        "disbursement_status": choice(row.get("disbursement_status"), DISBURSEMENT_STATUSES),
        "disbursement_date": format_date(row.get("disbursement_date")),
    }


def _user(row: dict) -> dict:
    return {
        "id": number(row.get("id")),
        "name": text(row.get("name")),
        "mobile": text(row.get("mobile")),
        "username": text(row.get("username")),
        "password": text(row.get("password")),
        "role": choice(row.get("role"), ROLES, "user"),
    }


def _task(row: dict, now: str) -> dict:
    return {
        "id": number(row.get("id")),
        "userId": number(row.get("userId")),
        "text": text(row.get("text")),
        "isCompleted": flag(row.get("isCompleted")),
        "createdAt": text(row.get("createdAt")) or now,
        "updatedAt": text(row.get("updatedAt")) or now,
    }


def read_workbook(content: bytes) -> dict:
    """
    Rebuilds a raw document from a backup workbook.
    Missing Employees/Beneficiaries/AssistanceTypes/Operations sheets become
    empty lists. A missing Users sheet gives an empty list and a missing
    Tasks sheet leaves the key out; the reconciler fills both.
    """
    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object)
    now = datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    raw = {
        "employees": [_employee(r) for r in _records(sheets, EMPLOYEES_SHEET) or []],
        "beneficiaries": [_beneficiary(r) for r in _records(sheets, BENEFICIARIES_SHEET) or []],
        "assistanceTypes": [_assistance_type(r) for r in _records(sheets, ASSISTANCE_SHEET) or []],
        "operations": [_operation(r) for r in _records(sheets, OPERATIONS_SHEET) or []],
        "users": [_user(r) for r in _records(sheets, USERS_SHEET) or []],
    }
    tasks = _records(sheets, TASKS_SHEET)
    if tasks is not None:
        raw["tasks"] = [_task(r, now) for r in tasks]
    logger.info("Read workbook with sheets: %s", ", ".join(sheets))
    return raw
