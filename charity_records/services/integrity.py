# charity_records/services/integrity.py
"""Cascades from employee changes onto the beneficiaries they look after."""
import logging
from typing import Iterable

from charity_records.config import settings
from charity_records.schemas import Document

logger = logging.getLogger(__name__)


def rename_employee(document: Document, old_id: str, new_id: str) -> Document:
    """Points every beneficiary of ``old_id`` at ``new_id``."""
    if old_id == new_id:
        return document
    beneficiaries = [
        b.model_copy(update={"employee_national_id": new_id}) if b.employee_national_id == old_id else b
        for b in document.beneficiaries
    ]
    return document.model_copy(update={"beneficiaries": beneficiaries})


def freeze_employees(document: Document, national_ids: Iterable[str], frozen: bool = True) -> Document:
    """
    Sets ``is_frozen`` on the given employees. Freezing moves all of their
    beneficiaries to the volunteer employee; unfreezing leaves them there.
    """
    ids = set(national_ids)
    employees = [
        e.model_copy(update={"is_frozen": frozen}) if e.national_id in ids else e
        for e in document.employees
    ]
    beneficiaries = document.beneficiaries
    if frozen:
        moved = 0
        beneficiaries = []
        for ben in document.beneficiaries:
            if ben.employee_national_id in ids:
                ben = ben.model_copy(update={"employee_national_id": settings.VOLUNTEER_NATIONAL_ID})
                moved += 1
            beneficiaries.append(ben)
        if moved:
            logger.info("Reassigned %d beneficiaries to volunteer after freezing %d employees", moved, len(ids))
    return document.model_copy(update={"employees": employees, "beneficiaries": beneficiaries})
