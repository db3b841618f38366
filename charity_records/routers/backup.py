import io
import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import StreamingResponse

from charity_records.auth import get_store, require_manager, require_user
from charity_records.schemas import User
from charity_records.services import backup
from charity_records.services.spreadsheet import XLSX_MEDIA_TYPE
from charity_records.store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter()


def _download(content: bytes, filename: str, media_type: str) -> StreamingResponse:
    # Organization names are usually Arabic, so the header carries the UTF-8 form too
    fallback = filename.encode("ascii", "replace").decode("ascii").replace("?", "_")
    headers = {
        "Content-Disposition": f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quote(filename)}'
    }
    return StreamingResponse(io.BytesIO(content), headers=headers, media_type=media_type)


@router.get("/backup/json")
async def download_json_backup(store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    document = store.document
    return _download(backup.json_backup(document), backup.json_backup_filename(document), "application/json")


@router.get("/backup/excel")
async def download_excel_backup(store: DocumentStore = Depends(get_store), user: User = Depends(require_user)):
    document = store.document
    return _download(backup.excel_backup(document), backup.excel_backup_filename(document), XLSX_MEDIA_TYPE)


@router.post("/backup/restore")
async def restore_backup(
    file: UploadFile = File(...),
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_manager),
):
    content = await file.read()
    result = backup.restore_from_upload(store, file.filename, content)
    logger.info("Backup %s restored by %s", file.filename, user.username)
    return {
        "detail": "Data restored",
        "corrected_beneficiary_codes": result.corrected_beneficiary_codes,
        "corrected_operation_codes": result.corrected_operation_codes,
        "reassigned_assistance_ids": result.reassigned_assistance_ids,
    }


@router.get("/export")
async def export_excel(
    start_date: str = "",
    end_date: str = "",
    store: DocumentStore = Depends(get_store),
    user: User = Depends(require_user),
):
    document = store.document
    content = backup.export_workbook(document, start_date, end_date)
    return _download(content, backup.export_filename(document), XLSX_MEDIA_TYPE)
