# charity_records/services/reconciler.py
"""Validation and repair of untrusted documents before they replace the store.

Input is a raw mapping, either parsed from a JSON backup or rebuilt from a
workbook by ``spreadsheet.read_workbook``. Repairs are counted and returned;
only structural problems raise ``CorruptBackupError``.
"""
import copy
import logging
from dataclasses import dataclass
from typing import List, Optional

from pydantic import ValidationError

from charity_records.config import settings
from charity_records.exceptions import CorruptBackupError
from charity_records.schemas import Document, translate_label
from charity_records.security import hash_password, is_password_hash
from charity_records.seed import LEGACY_MANAGER_USERNAMES, default_tasks, default_users
from charity_records.services.codes import (
    BENEFICIARY_PREFIX, OPERATION_PREFIX, format_code, is_valid_code, is_valid_id, max_code_number,
)

logger = logging.getLogger(__name__)

REQUIRED_COLLECTIONS = ("employees", "beneficiaries", "assistanceTypes", "operations")


@dataclass
class RestoreResult:
    document: Document
    corrected_beneficiary_codes: int = 0
    corrected_operation_codes: int = 0
    reassigned_assistance_ids: int = 0


def migrate_user(user: dict) -> dict:
    """Fills a missing role and hashes a plaintext password."""
    user = dict(user)
    role = translate_label(user.get("role"))
    if not role:
        role = "manager" if user.get("username") in LEGACY_MANAGER_USERNAMES else "user"
    user["role"] = role
    password = user.get("password")
    if not is_password_hash(password):
        user["password"] = hash_password(str(password or "").strip())
    return user


def _translate_enums(record: dict, optional_fields=(), required_fields=()):
    for field in optional_fields:
        value = translate_label(record.get(field))
        record[field] = value or None
    for field in required_fields:
        value = translate_label(record.get(field))
        if value:
            record[field] = value
        else:
            # Blank enum cell falls back to the model default
            record.pop(field, None)


def repair_ids(records: List[dict]) -> int:
    """
    Gives every record with a missing, non-numeric, non-integral or duplicate
    id the next integer above the running maximum. Returns the repair count.
    """
    current_max = max((int(r.get("id")) for r in records if is_valid_id(r.get("id"))), default=0)
    seen = set()
    repaired = 0
    for record in records:
        value = record.get("id")
        if is_valid_id(value) and int(value) not in seen:
            record["id"] = int(value)
        else:
            current_max += 1
            record["id"] = current_max
            repaired += 1
        seen.add(record["id"])
    return repaired


def repair_codes(records: List[dict], prefix: str) -> int:
    """
    Replaces malformed or duplicate codes with freshly allocated ones,
    processed in collection order. Returns the repair count.
    """
    current_max = max_code_number((r.get("code") for r in records), prefix)
    seen = set()
    repaired = 0
    for record in records:
        code = record.get("code")
        if not is_valid_code(code, prefix) or code in seen:
            current_max += 1
            record["code"] = format_code(current_max, prefix)
            repaired += 1
        seen.add(record["code"])
    return repaired


def reconcile(raw, organization_name: Optional[str] = None) -> RestoreResult:
    if not isinstance(raw, dict):
        raise CorruptBackupError("Backup content is not a document")
    for key in REQUIRED_COLLECTIONS:
        if not isinstance(raw.get(key), list):
            raise CorruptBackupError(f"Backup is missing the '{key}' collection")

    for key in ("users", "tasks"):
        if raw.get(key) is not None and not isinstance(raw[key], list):
            raise CorruptBackupError(f"Backup has a malformed '{key}' collection")

    data = copy.deepcopy(raw)
    for key in REQUIRED_COLLECTIONS + ("users", "tasks"):
        if any(not isinstance(item, dict) for item in data.get(key) or []):
            raise CorruptBackupError(f"Backup has malformed '{key}' records")

    # --- USERS & TASKS ---
    users = data.get("users")
    if not isinstance(users, list) or not users:
        logger.info("Backup has no users, reseeding default accounts")
        data["users"] = [u.model_dump() for u in default_users()]
    else:
        data["users"] = [migrate_user(u) for u in users]
        repair_ids(data["users"])

    if data.get("tasks") is None:
        data["tasks"] = [t.model_dump(by_alias=True) for t in default_tasks()]
    else:
        repair_ids(data["tasks"])

    if not data.get("organizationName"):
        data["organizationName"] = organization_name or settings.ORGANIZATION_NAME
    if data.get("organizationLogo") is None:
        data["organizationLogo"] = ""

    # --- LEGACY LABELS ---
    for ben in data["beneficiaries"]:
        _translate_enums(ben, optional_fields=("research_result",), required_fields=("marital_status",))
    for op in data["operations"]:
        _translate_enums(op, optional_fields=("disbursement_status",), required_fields=("status",))

    # --- IDS & CODES ---
    reassigned = repair_ids(data["assistanceTypes"])
    repair_ids(data["operations"])
    corrected_beneficiaries = repair_codes(data["beneficiaries"], BENEFICIARY_PREFIX)
    corrected_operations = repair_codes(data["operations"], OPERATION_PREFIX)

    try:
        document = Document.model_validate(data)
    except ValidationError as e:
        logger.warning("Backup failed validation: %s", e)
        raise CorruptBackupError("Backup content does not match the expected format") from e

    if reassigned or corrected_beneficiaries or corrected_operations:
        logger.info(
            "Restore repaired %d assistance type ids, %d beneficiary codes, %d operation codes",
            reassigned, corrected_beneficiaries, corrected_operations,
        )
    return RestoreResult(
        document=document,
        corrected_beneficiary_codes=corrected_beneficiaries,
        corrected_operation_codes=corrected_operations,
        reassigned_assistance_ids=reassigned,
    )
