import json
import os
from datetime import datetime, timedelta, timezone

import pytest

from charity_records.config import settings
from charity_records.exceptions import CorruptBackupError, UnsupportedFileType
from charity_records.services import backup

NOW = datetime(2024, 3, 5, 8, 0, tzinfo=timezone.utc)


def test_json_backup_round_trip(store):
    original = store.document
    content = backup.json_backup(original)
    result = backup.restore_from_upload(store, "backup.json", content)
    assert result.document == original
    assert (result.corrected_beneficiary_codes, result.corrected_operation_codes, result.reassigned_assistance_ids) == (0, 0, 0)


def test_json_backup_is_pretty_printed(document):
    content = backup.json_backup(document).decode("utf-8")
    assert content.startswith('{\n  "users"')
    assert json.loads(content)["assistanceTypes"][0]["name"] == "مساعدة مالية"


def test_excel_backup_round_trip(store):
    original = store.document
    result = backup.restore_from_upload(store, "backup.XLSX", backup.excel_backup(original))
    restored = result.document
    assert restored.employees == original.employees
    assert [b.code for b in restored.beneficiaries] == [b.code for b in original.beneficiaries]
    assert restored.beneficiaries[0].notes == original.beneficiaries[0].notes
    assert restored.assistance_types == original.assistance_types
    assert [(o.code, o.status, o.amount) for o in restored.operations] == [
        (o.code, o.status, o.amount) for o in original.operations
    ]
    assert restored.users == original.users
    assert restored.tasks == original.tasks
    assert restored.organization_name == original.organization_name


def test_restore_persists_document(store):
    raw = store.document.dump()
    raw["organizationName"] = "جمعية جديدة"
    backup.restore_from_upload(store, "b.json", json.dumps(raw).encode("utf-8"))
    store.document = None
    assert store.load().organization_name == "جمعية جديدة"


def test_unsupported_extension(store):
    with pytest.raises(UnsupportedFileType):
        backup.restore_from_upload(store, "backup.csv", b"a,b")


def test_corrupt_json_leaves_store_untouched(store):
    before = store.document
    with pytest.raises(CorruptBackupError):
        backup.restore_from_upload(store, "backup.json", b"{not json")
    with pytest.raises(CorruptBackupError):
        backup.restore_from_upload(store, "backup.json", json.dumps({"employees": []}).encode())
    assert store.document is before


def test_corrupt_workbook(store):
    with pytest.raises(CorruptBackupError):
        backup.restore_from_upload(store, "backup.xlsx", b"definitely not a zip")


def test_filenames(document):
    assert backup.json_backup_filename(document, NOW) == "backup-مؤسسة-الجارحي-2024-03-05.json"
    assert backup.excel_backup_filename(document, NOW) == "backup-excel-مؤسسة-الجارحي-2024-03-05.xlsx"


def test_auto_backup_runs_when_never_done(store):
    path = backup.run_auto_backup_if_due(store, NOW)
    assert path is not None
    assert os.path.dirname(path) == settings.BACKUP_DIR
    with open(path, encoding="utf-8") as f:
        assert json.load(f)["organizationName"] == store.document.organization_name
    assert store.get_last_backup() == NOW


def test_auto_backup_skipped_within_interval(store):
    store.set_last_backup(NOW - timedelta(hours=2))
    assert backup.run_auto_backup_if_due(store, NOW) is None


def test_auto_backup_runs_after_interval(store):
    store.set_last_backup(NOW - timedelta(hours=25))
    assert backup.run_auto_backup_if_due(store, NOW) is not None
