# charity_records/services/backup.py
import json
import logging
import os
import zipfile
from datetime import datetime, timedelta, timezone
from typing import Optional

from charity_records.config import settings
from charity_records.exceptions import CorruptBackupError, UnsupportedFileType
from charity_records.schemas import Document
from charity_records.services import queries, spreadsheet
from charity_records.services.reconciler import RestoreResult

logger = logging.getLogger(__name__)


def _safe_name(name: str) -> str:
    return (name or "").strip().replace(" ", "-").replace("/", "-")


def _today(now: Optional[datetime] = None) -> str:
    return (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d")


def json_backup_filename(document: Document, now: Optional[datetime] = None) -> str:
    return f"backup-{_safe_name(document.organization_name)}-{_today(now)}.json"


def excel_backup_filename(document: Document, now: Optional[datetime] = None) -> str:
    return f"backup-excel-{_safe_name(document.organization_name)}-{_today(now)}.xlsx"


def export_filename(document: Document, now: Optional[datetime] = None) -> str:
    return f"export-{_safe_name(document.organization_name)}-{_today(now)}.xlsx"


def json_backup(document: Document) -> bytes:
    return json.dumps(document.dump(), ensure_ascii=False, indent=2).encode("utf-8")


def excel_backup(document: Document) -> bytes:
    return spreadsheet.write_backup_workbook(document)


def export_workbook(document: Document, start_date: str = "", end_date: str = "") -> bytes:
    """Beneficiaries filtered by join date and operations by date, both inclusive."""
    beneficiaries = [b for b in document.beneficiaries if queries.in_range(b.join_date, start_date, end_date)]
    operations = [o for o in document.operations if queries.in_range(o.date, start_date, end_date)]
    statuses = {b.national_id: queries.research_status(b) for b in beneficiaries}
    return spreadsheet.write_export_workbook(document, beneficiaries, operations, statuses)


def parse_upload(filename: str, content: bytes) -> dict:
    """Raw document from an uploaded .json or .xlsx backup."""
    extension = os.path.splitext(filename or "")[1].lower()
    if extension == ".json":
        try:
            return json.loads(content.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise CorruptBackupError("Backup file is not valid JSON") from e
    if extension == ".xlsx":
        try:
            return spreadsheet.read_workbook(content)
        except (ValueError, KeyError, OSError, zipfile.BadZipFile) as e:
            raise CorruptBackupError("Backup workbook could not be read") from e
    raise UnsupportedFileType("Only .json and .xlsx backups can be restored")


def restore_from_upload(store, filename: str, content: bytes) -> RestoreResult:
    raw = parse_upload(filename, content)
    return store.restore(raw)


def run_auto_backup_if_due(store, now: Optional[datetime] = None) -> Optional[str]:
    """
    Writes a JSON backup into BACKUP_DIR when the last automatic backup is
    missing or older than AUTO_BACKUP_INTERVAL_HOURS. Returns the file path.
    """
    if not settings.AUTO_BACKUP_ENABLED:
        return None
    now = now or datetime.now(timezone.utc)
    last = store.get_last_backup()
    if last is not None:
        if last.tzinfo is None:
            last = last.replace(tzinfo=timezone.utc)
        if now - last <= timedelta(hours=settings.AUTO_BACKUP_INTERVAL_HOURS):
            return None

    os.makedirs(settings.BACKUP_DIR, exist_ok=True)
    path = os.path.join(settings.BACKUP_DIR, json_backup_filename(store.document, now))
    try:
        with open(path, "wb") as f:
            f.write(json_backup(store.document))
    except OSError as e:
        logger.error("Automatic backup failed: %s", e)
        return None
    store.set_last_backup(now)
    logger.info("Automatic daily backup written to %s", path)
    return path
