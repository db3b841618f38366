# charity_records/database.py
from sqlmodel import SQLModel, create_engine
from charity_records.config import settings
from charity_records.models import StoredValue  # Import models to register them

# SQLite specific args
connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, echo=False, connect_args=connect_args)


def create_db_and_tables(bind=None):
    """Creates the database tables based on the models."""
    SQLModel.metadata.create_all(bind or engine)
