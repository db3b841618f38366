from charity_records.services.integrity import freeze_employees, rename_employee

AHMED = "28501010100111"
FATMA = "29002020100222"


def owners(document):
    return {b.code: b.employee_national_id for b in document.beneficiaries}


def test_freeze_reassigns_only_that_employees_beneficiaries(document):
    frozen = freeze_employees(document, [AHMED], True)
    assert owners(frozen) == {"B001": "VOLUNTEER", "B002": FATMA, "B003": "VOLUNTEER"}
    assert frozen.get_employee(AHMED).is_frozen
    assert not frozen.get_employee(FATMA).is_frozen


def test_freeze_does_not_touch_original_snapshot(document):
    freeze_employees(document, [AHMED], True)
    assert owners(document)["B001"] == AHMED
    assert not document.get_employee(AHMED).is_frozen


def test_bulk_freeze_covers_union_of_employees(document):
    frozen = freeze_employees(document, [AHMED, FATMA], True)
    assert set(owners(frozen).values()) == {"VOLUNTEER"}


def test_unfreeze_keeps_volunteer_assignment(document):
    frozen = freeze_employees(document, [AHMED], True)
    thawed = freeze_employees(frozen, [AHMED], False)
    assert not thawed.get_employee(AHMED).is_frozen
    assert owners(thawed)["B001"] == "VOLUNTEER"


def test_rename_moves_every_reference(document):
    renamed = rename_employee(document, AHMED, "28501010100999")
    assert AHMED not in owners(renamed).values()
    assert owners(renamed) == {"B001": "28501010100999", "B002": FATMA, "B003": "28501010100999"}


def test_rename_to_same_id_is_noop(document):
    assert rename_employee(document, AHMED, AHMED) is document
