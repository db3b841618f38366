# charity_records/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from charity_records.database import create_db_and_tables
from charity_records.exceptions import RecordError, ValidationFailed
from charity_records.routers import assistance, auth, backup, beneficiaries, employees, operations, reports, settings, tasks
from charity_records.services.backup import run_auto_backup_if_due
from charity_records.store import DocumentStore

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    store = DocumentStore()
    store.load()
    app.state.store = store
    run_auto_backup_if_due(store)
    yield


app = FastAPI(lifespan=lifespan, title="Charity Records")


@app.exception_handler(ValidationFailed)
async def validation_failed_handler(request: Request, exc: ValidationFailed):
    return JSONResponse(status_code=exc.status_code, content={"detail": {"errors": exc.errors}})


@app.exception_handler(RecordError)
async def record_error_handler(request: Request, exc: RecordError):
    if exc.status_code != 404:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


app.include_router(auth.router)
app.include_router(employees.router)
app.include_router(beneficiaries.router)
app.include_router(assistance.router)
app.include_router(operations.router)
app.include_router(tasks.router)
app.include_router(reports.router)
app.include_router(backup.router)
app.include_router(settings.router)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("charity_records.main:app", host="127.0.0.1", port=8000, reload=True)
