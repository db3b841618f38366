import io
import json

import pytest

from charity_records import crud
from charity_records.schemas import UserCreate

BENEFICIARY = {
    "name": "منى سعيد", "national_id": "29901010100777", "join_date": "2024-01-10", "phone": "01098765400",
    "governorate": "القاهرة", "city": "المعادي", "area": "دجلة", "detailed_address": "شارع 9", "job": "معلمة",
    "family_members": 2, "marital_status": "single", "employee_national_id": "28501010100111",
}


@pytest.fixture
def user_client(client, store):
    document, _ = crud.create_user(store.document, UserCreate(
        name="Sara", mobile="01255554444", username="sara", password="pw", role="user"))
    store.commit(document)
    assert client.post("/login", data={"username": "Sara", "password": "pw"}).status_code == 200
    return client


def test_requires_login(client):
    assert client.get("/beneficiaries").status_code == 401
    assert client.get("/me").status_code == 401


def test_login_and_logout(client):
    response = client.post("/login", data={"username": " ad-min ", "password": " Admin "})
    assert response.status_code == 200
    assert response.json()["username"] == "Admin"
    assert "password" not in response.json()
    assert client.get("/me").json()["role"] == "manager"

    client.get("/logout")
    assert client.get("/me").status_code == 401


def test_bad_login(client):
    response = client.post("/login", data={"username": "Admin", "password": "wrong"})
    assert response.status_code == 400
    assert "session_token" not in response.cookies


def test_organization_is_public(client):
    assert client.get("/settings/organization").json()["name"] == "مؤسسة الجارحي"


def test_users_are_manager_only(user_client):
    assert user_client.get("/users").status_code == 403
    assert user_client.put("/settings/organization", json={"name": "x"}).status_code == 403


def test_user_management(manager_client):
    response = manager_client.post("/users", json={
        "name": "Omar", "mobile": "01533332222", "username": "omar", "password": "pw", "role": "user"})
    assert response.status_code == 201
    user_id = response.json()["id"]
    assert manager_client.post(f"/users/{user_id}/password", json={"password": "new"}).status_code == 200
    assert manager_client.delete(f"/users/{user_id}").json() == {"deleted": [user_id]}
    assert manager_client.delete("/users/1").status_code == 403


def test_validation_errors_are_field_maps(manager_client):
    response = manager_client.post("/beneficiaries", json={**BENEFICIARY, "phone": "123"})
    assert response.status_code == 400
    assert set(response.json()["detail"]["errors"]) == {"phone"}


def test_beneficiary_flow(user_client):
    created = user_client.post("/beneficiaries", json=BENEFICIARY)
    assert created.status_code == 201
    assert created.json()["code"] == "B004"

    response = user_client.post("/beneficiaries/29901010100777/notes", json={"text": "زيارة منزلية"})
    assert response.status_code == 201
    assert response.json()[0]["text"] == "زيارة منزلية"

    details = user_client.get("/beneficiaries/29901010100777").json()
    assert details["operations_count"] == 0
    assert details["research_status"] == "not_started"

    listing = user_client.get("/beneficiaries", params={"search": "منى"}).json()
    assert listing["total"] == 1
    assert listing["items"][0]["employee_name"] == "أحمد محمود"

    assert user_client.get("/beneficiaries/20000000000000").status_code == 404


def test_freeze_endpoint_moves_beneficiaries(user_client, store):
    response = user_client.post("/employees/freeze", json={"national_ids": ["28501010100111"], "frozen": True})
    assert response.status_code == 200
    assert store.document.get_beneficiary("29503030100333").employee_national_id == "VOLUNTEER"


def test_operations_list_and_delete(user_client, store):
    listing = user_client.get("/operations", params={"status": "accepted", "sort": "amount", "desc": True}).json()
    assert [op["code"] for op in listing["items"]] == ["OP004", "OP006", "OP001", "OP002"]
    assert listing["items"][0]["assistance_name"] == "علاج طبي"

    assert user_client.post("/operations/delete", json={"ids": [1, 2]}).status_code == 200
    assert [o.code for o in store.document.operations][:1] == ["OP003"]


def test_tasks_are_private(user_client, store):
    created = user_client.post("/tasks", json={"text": "مراجعة"}).json()
    assert created["userId"] == store.document.get_user_by_username("sara").id
    assert [t["id"] for t in user_client.get("/tasks").json()] == [created["id"]]
    assert user_client.post("/tasks/1/toggle").status_code == 404
    assert user_client.post(f"/tasks/{created['id']}/toggle").status_code == 200


def test_dashboard_and_incentive(manager_client):
    stats = manager_client.get("/dashboard").json()
    assert stats["beneficiaries"] == 3
    assert [t["id"] for t in stats["tasks"]] == [1, 2]

    report = manager_client.post("/incentive", json={
        "employee_national_id": "28501010100111", "classifications": {"29503030100333": "internal"}}).json()
    assert report["total"] == 1
    assert report["internal_count"] == 1


def test_search_single_match_includes_details(manager_client):
    response = manager_client.get("/search", params={"term": "B003"}).json()
    assert len(response["results"]) == 1
    assert response["details"]["operations_count"] == 1


def test_governorates(manager_client):
    governorates = manager_client.get("/meta/governorates").json()
    assert "المعادي" in governorates["القاهرة"]


def test_json_backup_download_and_restore(manager_client, store):
    response = manager_client.get("/backup/json")
    assert response.status_code == 200
    assert "attachment" in response.headers["content-disposition"]
    raw = response.json()

    raw["beneficiaries"][1]["code"] = "X12"
    raw["assistanceTypes"].append({"id": 1, "name": "مكرر"})
    upload = {"file": ("backup.json", io.BytesIO(json.dumps(raw).encode("utf-8")), "application/json")}
    result = manager_client.post("/backup/restore", files=upload).json()
    assert result["corrected_beneficiary_codes"] == 1
    assert result["reassigned_assistance_ids"] == 1
    assert store.document.get_beneficiary("29204040200444").code == "B004"


def test_restore_rejects_other_files(manager_client):
    upload = {"file": ("backup.txt", io.BytesIO(b"hello"), "text/plain")}
    assert manager_client.post("/backup/restore", files=upload).status_code == 415
    upload = {"file": ("backup.json", io.BytesIO(b"[]"), "application/json")}
    assert manager_client.post("/backup/restore", files=upload).status_code == 400


def test_restore_with_scalar_users_is_rejected(manager_client, store):
    before = store.document
    raw = manager_client.get("/backup/json").json()
    raw["users"] = 5
    upload = {"file": ("backup.json", io.BytesIO(json.dumps(raw).encode("utf-8")), "application/json")}
    assert manager_client.post("/backup/restore", files=upload).status_code == 400
    assert store.document is before


def test_excel_downloads(manager_client):
    for url in ("/backup/excel", "/export?start_date=2023-01-01&end_date=2023-12-31"):
        response = manager_client.get(url)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/vnd.openxmlformats")
        assert response.content[:2] == b"PK"
