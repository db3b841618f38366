import io
import math
from datetime import date, datetime, timezone

import pandas as pd
import pytest

from charity_records.schemas import Note
from charity_records.services import spreadsheet
from charity_records.services.spreadsheet import flag, format_date, format_notes, number, parse_notes, text


@pytest.mark.parametrize("value,expected", [
    (None, ""),
    (math.nan, ""),
    ("  Sara ", "Sara"),
    (29503030100333.0, "29503030100333"),
    (12, "12"),
])
def test_text(value, expected):
    assert text(value) == expected


@pytest.mark.parametrize("value,expected", [
    ("5", 5),
    (2.0, 2),
    (2.5, 2.5),
    ("abc", None),
    (math.nan, None),
    (None, None),
])
def test_number(value, expected):
    assert number(value) == expected


@pytest.mark.parametrize("value,expected", [
    (None, False),
    (math.nan, False),
    (True, True),
    (0, False),
    (1, True),
    ("false", False),
    ("FALSE", False),
    ("0", False),
    ("true", True),
])
def test_flag(value, expected):
    assert flag(value) is expected


@pytest.mark.parametrize("value,expected", [
    ("2023-05-10", "2023-05-10"),
    ("2023-05-10T22:30:00.000Z", "2023-05-10"),
    (datetime(2023, 5, 10, 23, 0, tzinfo=timezone.utc), "2023-05-10"),
    (date(2023, 5, 10), "2023-05-10"),
    ("10/05/2023", ""),
    (None, ""),
    (45000, ""),
])
def test_format_date(value, expected):
    assert format_date(value) == expected


def test_parse_notes_drops_unparseable_lines():
    cell = "[26/10/2023 10:00:00] first\nno bracket\n[yesterday] broken\n[15/11/2023 14:30:00] second"
    assert parse_notes(cell) == [
        {"text": "first", "date": "2023-10-26T10:00:00.000Z"},
        {"text": "second", "date": "2023-11-15T14:30:00.000Z"},
    ]


def test_parse_notes_empty_cell():
    assert parse_notes(None) == []
    assert parse_notes("") == []


def test_notes_format_matches_parser():
    notes = [Note(text="تحتاج إلى مساعدة", date="2023-10-26T10:00:00.000Z")]
    cell = format_notes(notes)
    assert cell == "[26/10/2023 10:00:00] تحتاج إلى مساعدة"
    assert parse_notes(cell) == [n.model_dump() for n in notes]


def test_multiline_note_keeps_its_text():
    notes = [
        Note(text="زيارة منزلية\nتم التحقق من الدخل", date="2023-10-26T10:00:00.000Z"),
        Note(text="متابعة", date="2023-11-15T14:30:00.000Z"),
    ]
    cell = format_notes(notes)
    assert cell.count("\n") == 1
    assert parse_notes(cell) == [
        {"text": "زيارة منزلية تم التحقق من الدخل", "date": "2023-10-26T10:00:00.000Z"},
        {"text": "متابعة", "date": "2023-11-15T14:30:00.000Z"},
    ]


def test_backup_workbook_has_fixed_sheets(document):
    content = spreadsheet.write_backup_workbook(document)
    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None)
    assert list(sheets) == ["Employees", "Beneficiaries", "AssistanceTypes", "Operations", "Users", "Tasks"]


def test_read_workbook_restores_records(document):
    raw = spreadsheet.read_workbook(spreadsheet.write_backup_workbook(document))
    assert [b["code"] for b in raw["beneficiaries"]] == ["B001", "B002", "B003"]
    first = raw["beneficiaries"][0]
    assert first["national_id"] == "29503030100333"
    assert first["phone"] == "01234567890"
    assert first["marital_status"] == "married"
    assert first["notes"] == [n.model_dump() for n in document.beneficiaries[0].notes]
    assert raw["operations"][0]["amount"] == 500
    assert raw["operations"][3]["disbursement_status"] == "in_progress"
    assert [a["id"] for a in raw["assistanceTypes"]] == [1, 2, 3]
    assert raw["tasks"][1]["isCompleted"] is True


def _workbook(sheets):
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, index=False, sheet_name=name)
    return output.getvalue()


def test_read_workbook_accepts_arabic_sheet_names_and_labels():
    content = _workbook({
        "الموظفين": [{"name": "أحمد", "national_id": 28501010100111, "phone": "01012345678"}],
        "المستفيدين": [{"code": "B001", "name": "سارة", "national_id": "29503030100333", "marital_status": "متزوج",
                         "research_result": "مقبول", "join_date": "2023-01-15"}],
        "أنواع المساعدات": [{"id": 1, "name": "مساعدة مالية"}],
        "العمليات": [{"id": 1, "code": "OP001", "beneficiary_national_id": "29503030100333", "assistance_id": 1,
                      "amount": 500, "status": "غير معروف", "date": "2023-02-01"}],
    })
    raw = spreadsheet.read_workbook(content)
    assert raw["employees"][0]["national_id"] == "28501010100111"
    assert raw["beneficiaries"][0]["marital_status"] == "married"
    assert raw["beneficiaries"][0]["research_result"] == "accepted"
    assert raw["operations"][0]["status"] == "pending"
    assert raw["users"] == []
    assert "tasks" not in raw


def test_export_workbook_adds_research_status(document):
    content = spreadsheet.write_export_workbook(
        document, document.beneficiaries[:1], document.operations, {"29503030100333": "accepted"},
    )
    sheets = pd.read_excel(io.BytesIO(content), sheet_name=None)
    assert "Users" not in sheets
    assert sheets["Beneficiaries"]["research_status"].tolist() == ["accepted"]
