# charity_records/store.py
import json
import logging
from datetime import datetime
from typing import Optional

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from charity_records.config import settings
from charity_records.database import engine as default_engine
from charity_records.exceptions import CorruptBackupError
from charity_records.models import DOCUMENT_KEY, LAST_AUTO_BACKUP_KEY, StoredValue, utc_now
from charity_records.schemas import Document
from charity_records.seed import default_document
from charity_records.services.reconciler import RestoreResult, reconcile

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Owns the current document snapshot.

    Mutations happen elsewhere (crud, integrity) as functions returning a new
    snapshot; ``commit()`` installs it and writes the whole document back.
    """

    def __init__(self, engine=None):
        self.engine = engine or default_engine
        self.document: Optional[Document] = None

    # --- PERSISTENCE ---

    def initial_document(self) -> Document:
        """Seed document: SEED_DATA_PATH when configured, the built-in data otherwise."""
        if settings.SEED_DATA_PATH:
            logger.info("Loading seed data from %s", settings.SEED_DATA_PATH)
            with open(settings.SEED_DATA_PATH, encoding="utf-8") as f:
                return reconcile(json.load(f)).document
        return default_document()

    def _read(self, key: str) -> Optional[str]:
        with Session(self.engine) as session:
            row = session.get(StoredValue, key)
            return row.value if row else None

    def _write(self, key: str, value: str):
        with Session(self.engine) as session:
            row = session.get(StoredValue, key)
            if row is None:
                row = StoredValue(key=key, value=value)
            else:
                row.value = value
                row.updated_at = utc_now()
            session.add(row)
            session.commit()

    def load(self) -> Document:
        """
        Reads the persisted document, migrating older data on the way.
        Anything unreadable falls back to the built-in seed document.
        """
        try:
            stored = self._read(DOCUMENT_KEY)
        except SQLAlchemyError as e:
            logger.error("Could not read stored document: %s", e)
            stored = None

        if stored is None:
            logger.info("No stored document, seeding initial data")
            self.document = self.initial_document()
            self.save()
            return self.document

        try:
            self.document = reconcile(json.loads(stored)).document
        except (json.JSONDecodeError, CorruptBackupError, ValidationError) as e:
            logger.error("Stored document is unusable, falling back to seed data: %s", e)
            self.document = self.initial_document()
        return self.document

    def save(self):
        """Writes the whole document. Failures are logged, never raised."""
        try:
            self._write(DOCUMENT_KEY, json.dumps(self.document.dump(), ensure_ascii=False))
        except SQLAlchemyError as e:
            logger.error("Failed to save document: %s", e)

    def commit(self, document: Document) -> Document:
        self.document = document
        self.save()
        return document

    def restore(self, raw) -> RestoreResult:
        """Reconciles an untrusted document and installs it. Nothing changes on failure."""
        current_name = self.document.organization_name if self.document else None
        result = reconcile(raw, organization_name=current_name)
        self.commit(result.document)
        logger.info(
            "Restored document: %d employees, %d beneficiaries, %d operations",
            len(result.document.employees), len(result.document.beneficiaries), len(result.document.operations),
        )
        return result

    # --- AUTO BACKUP TIMESTAMP ---

    def get_last_backup(self) -> Optional[datetime]:
        try:
            value = self._read(LAST_AUTO_BACKUP_KEY)
        except SQLAlchemyError as e:
            logger.error("Could not read last backup time: %s", e)
            return None
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None

    def set_last_backup(self, when: datetime):
        try:
            self._write(LAST_AUTO_BACKUP_KEY, when.isoformat())
        except SQLAlchemyError as e:
            logger.error("Could not store last backup time: %s", e)
