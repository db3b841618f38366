import math

import pytest

from charity_records.exceptions import CorruptBackupError
from charity_records.security import is_password_hash, verify_password
from charity_records.seed import default_tasks
from charity_records.services.reconciler import reconcile


def minimal(**overrides):
    raw = {
        "employees": [],
        "beneficiaries": [],
        "assistanceTypes": [],
        "operations": [],
        "users": [{"id": 1, "username": "Admin", "password": "Admin", "role": "manager"}],
        "tasks": [],
        "organizationName": "Test Org",
    }
    raw.update(overrides)
    return raw


def beneficiary(national_id, code):
    return {"code": code, "name": "Name", "national_id": national_id, "employee_national_id": "VOLUNTEER"}


def operation(op_id, code, national_id="29503030100333"):
    return {
        "id": op_id, "code": code, "beneficiary_national_id": national_id,
        "assistance_id": 1, "amount": 100, "date": "2024-01-01", "status": "pending",
    }


@pytest.mark.parametrize("missing", ["employees", "beneficiaries", "assistanceTypes", "operations"])
def test_missing_required_collection_is_corrupt(missing):
    raw = minimal()
    del raw[missing]
    with pytest.raises(CorruptBackupError):
        reconcile(raw)


def test_non_mapping_is_corrupt():
    with pytest.raises(CorruptBackupError):
        reconcile(["not", "a", "document"])


def test_collection_of_wrong_type_is_corrupt():
    with pytest.raises(CorruptBackupError):
        reconcile(minimal(operations="nope"))


@pytest.mark.parametrize("key,value", [("users", 5), ("users", True), ("tasks", 5), ("tasks", "nope"), ("tasks", {"id": 1})])
def test_scalar_users_or_tasks_is_corrupt(key, value):
    with pytest.raises(CorruptBackupError):
        reconcile(minimal(**{key: value}))


def test_schema_mismatch_is_corrupt():
    with pytest.raises(CorruptBackupError):
        reconcile(minimal(beneficiaries=[{"code": "B001"}]))


def test_input_is_not_modified():
    raw = minimal(beneficiaries=[beneficiary("29503030100333", "X12")])
    reconcile(raw)
    assert raw["beneficiaries"][0]["code"] == "X12"


def test_duplicate_assistance_id_gets_next_max():
    raw = minimal(assistanceTypes=[
        {"id": 1, "name": "a"},
        {"id": 4, "name": "b"},
        {"id": 1, "name": "c"},
    ])
    result = reconcile(raw)
    assert [a.id for a in result.document.assistance_types] == [1, 4, 5]
    assert result.reassigned_assistance_ids == 1


def test_bad_assistance_ids_get_distinct_new_ids():
    raw = minimal(assistanceTypes=[
        {"id": 2, "name": "a"},
        {"name": "b"},
        {"id": math.nan, "name": "c"},
        {"id": "seven", "name": "d"},
        {"id": 1.5, "name": "e"},
    ])
    result = reconcile(raw)
    assert [a.id for a in result.document.assistance_types] == [2, 3, 4, 5, 6]
    assert result.reassigned_assistance_ids == 4


def test_invalid_beneficiary_code_replaced():
    raw = minimal(beneficiaries=[
        beneficiary("29503030100333", "B005"),
        beneficiary("29204040200444", "X12"),
    ])
    result = reconcile(raw)
    assert [b.code for b in result.document.beneficiaries] == ["B005", "B006"]
    assert result.corrected_beneficiary_codes == 1


def test_duplicate_operation_code_replaced_in_order():
    raw = minimal(operations=[operation(1, "OP002"), operation(2, "OP002"), operation(3, "")])
    result = reconcile(raw)
    assert [o.code for o in result.document.operations] == ["OP002", "OP003", "OP004"]
    assert result.corrected_operation_codes == 2


def test_missing_users_reseeds_default_managers():
    result = reconcile(minimal(users=[]))
    users = result.document.users
    assert [u.username for u in users] == ["Admin", "Tarek"]
    assert all(u.role == "manager" for u in users)
    assert verify_password("Admin", users[0].password)


def test_legacy_roles_are_migrated():
    raw = minimal(users=[
        {"id": 1, "username": "Admin", "password": "Admin"},
        {"id": 2, "username": "Tarek", "password": "123", "role": ""},
        {"id": 3, "username": "sara", "password": "pw"},
        {"id": 4, "username": "omar", "password": "pw", "role": "مدير"},
    ])
    roles = [u.role for u in reconcile(raw).document.users]
    assert roles == ["manager", "manager", "user", "manager"]


def test_plaintext_passwords_are_hashed():
    user = reconcile(minimal()).document.users[0]
    assert is_password_hash(user.password)
    assert verify_password("Admin", user.password)


def test_existing_hash_is_kept():
    first = reconcile(minimal()).document
    again = reconcile(first.dump()).document
    assert again.users[0].password == first.users[0].password


def test_missing_tasks_reseeded():
    raw = minimal()
    del raw["tasks"]
    tasks = reconcile(raw).document.tasks
    assert tasks == default_tasks()


def test_empty_task_list_is_kept():
    assert reconcile(minimal(tasks=[])).document.tasks == []


def test_missing_organization_name_uses_fallback():
    raw = minimal()
    del raw["organizationName"]
    assert reconcile(raw, organization_name="Kept Name").document.organization_name == "Kept Name"


def test_legacy_labels_translated():
    ben = beneficiary("29503030100333", "B001")
    ben.update({"marital_status": "أرمل", "research_result": "مرفوض", "research_submission_date": "2024-01-01"})
    op = operation(1, "OP001")
    op.update({"status": "مقبوله", "disbursement_status": "تم الصرف"})
    doc = reconcile(minimal(beneficiaries=[ben], operations=[op])).document
    assert doc.beneficiaries[0].marital_status == "widowed"
    assert doc.beneficiaries[0].research_result == "rejected"
    assert doc.operations[0].status == "accepted"
    assert doc.operations[0].disbursement_status == "disbursed"


def test_blank_optional_enum_becomes_none():
    op = operation(1, "OP001")
    op["disbursement_status"] = ""
    assert reconcile(minimal(operations=[op])).document.operations[0].disbursement_status is None


def test_code_with_arabic_indic_digits_replaced():
    raw = minimal(beneficiaries=[
        beneficiary("29503030100333", "B001"),
        beneficiary("29204040200444", "B١٢"),
    ])
    result = reconcile(raw)
    assert [b.code for b in result.document.beneficiaries] == ["B001", "B002"]
    assert result.corrected_beneficiary_codes == 1
