# charity_records/models.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime
from sqlmodel import Field, SQLModel

# Keys of the rows in StoredValue
DOCUMENT_KEY = "charityAppData"
LAST_AUTO_BACKUP_KEY = "lastAutoBackupTimestamp"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoredValue(SQLModel, table=True):
    """One persisted blob. The whole document is rewritten on every save."""
    key: str = Field(primary_key=True)
    value: str
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
