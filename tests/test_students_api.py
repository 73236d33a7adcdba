from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from main import create_app
from students import errors
from students.model import Student


def _timestamp(value: str) -> datetime:
    # pydantic writes UTC as "Z"; fromisoformat only accepts it from 3.11 on.
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _create(client, headers, **body):
    payload = {"fname": "Ada", "lname": "Lovelace"}
    payload.update(body)
    r = client.post("/api/v1/student", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def test_alive(client):
    r = client.get("/alive")
    assert r.status_code == 200
    assert r.json() == {"message": "I am Alive!"}
    assert r.headers["content-type"] == "application/json; charset=UTF-8"


def test_ready(client):
    r = client.get("/ready")
    assert r.status_code == 200
    assert r.json() == {"message": "I am Ready!"}


def test_ready_reports_unreachable_storage(client, store, monkeypatch):
    async def _ping(*, timeout_s):
        raise errors.StorageError("ping", "connection refused")

    monkeypatch.setattr(store, "ping", _ping)
    r = client.get("/ready")
    assert r.status_code == 500
    assert "connection refused" not in r.text


def test_create_ada_lovelace(client, auth_headers):
    r = client.post(
        "/api/v1/student",
        json={"fname": "Ada", "lname": "Lovelace", "dateofbirth": "10-12-1815"},
        headers=auth_headers("alice"),
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["id"]
    assert body["createdby"] == "alice"
    assert body["dateofbirth"] == "10-12-1815"
    assert body["createdon"] is not None
    assert body["updatedby"] is None
    assert body["updatedon"] is None


def test_create_ignores_client_supplied_id_and_audit_fields(client, auth_headers):
    body = _create(
        client,
        auth_headers("alice"),
        id="client-chosen-id",
        createdby="mallory",
        createdon="2000-01-01T00:00:00Z",
        updatedby="mallory",
    )
    assert body["id"] != "client-chosen-id"
    assert body["createdby"] == "alice"
    assert body["updatedby"] is None
    assert not body["createdon"].startswith("2000-01-01")


def test_created_ids_are_unique(client, auth_headers):
    headers = auth_headers()
    ids = {_create(client, headers)["id"] for _ in range(5)}
    assert len(ids) == 5


def test_create_then_get_round_trips_client_fields(client, auth_headers):
    headers = auth_headers()
    fields = {
        "fname": "Grace",
        "lname": "Hopper",
        "email": "grace@example.com",
        "gender": "female",
        "address": "Arlington, VA",
        "dateofbirth": "09-12-1906",
    }
    created = _create(client, headers, **fields)

    r = client.get(f"/api/v1/student/{created['id']}", headers=headers)
    assert r.status_code == 200, r.text
    fetched = r.json()
    for key, value in fields.items():
        assert fetched[key] == value
    assert fetched["createdby"] == created["createdby"]


def test_unset_fields_stay_null_and_blank_fields_stay_blank(client, auth_headers):
    headers = auth_headers()
    created = _create(client, headers, email="", address=None)

    fetched = client.get(f"/api/v1/student/{created['id']}", headers=headers).json()
    assert fetched["email"] == ""
    assert fetched["address"] is None
    assert fetched["gender"] is None
    assert fetched["dateofbirth"] is None


def test_names_are_optional_and_keep_blank_apart_from_omitted(client, auth_headers):
    headers = auth_headers()
    r = client.post("/api/v1/student", json={"email": "ada@example.com"}, headers=headers)
    assert r.status_code == 201, r.text
    omitted = client.get(f"/api/v1/student/{r.json()['id']}", headers=headers).json()
    assert omitted["fname"] is None
    assert omitted["lname"] is None

    r = client.post("/api/v1/student", json={"fname": "", "lname": ""}, headers=headers)
    assert r.status_code == 201, r.text
    blanked = client.get(f"/api/v1/student/{r.json()['id']}", headers=headers).json()
    assert blanked["fname"] == ""
    assert blanked["lname"] == ""


def test_create_accepts_camel_case_date_of_birth(client, auth_headers):
    body = _create(client, auth_headers(), dateOfBirth="01-02-2003")
    assert body["dateofbirth"] == "01-02-2003"


@pytest.mark.parametrize(
    "payload",
    [
        ["Ada", "Lovelace"],
        {"fname": 1815, "lname": "Lovelace"},
        {"fname": "A" * 101, "lname": "Lovelace"},
        {"fname": "Ada", "lname": "Lovelace", "dateofbirth": ""},
        {"fname": "Ada", "lname": "Lovelace", "dateofbirth": "1815-12-10"},
        {"fname": "Ada", "lname": "Lovelace", "dateofbirth": 18151210},
    ],
)
def test_create_validation_failures_are_400(client, auth_headers, store, monkeypatch, payload):
    calls = []
    original_insert = store.insert

    async def _insert(student):
        calls.append(student)
        return await original_insert(student)

    monkeypatch.setattr(store, "insert", _insert)
    r = client.post("/api/v1/student", json=payload, headers=auth_headers())
    assert r.status_code == 400, r.text
    assert calls == []


def test_create_rejects_malformed_json(client, auth_headers):
    headers = {**auth_headers(), "Content-Type": "application/json"}
    r = client.post("/api/v1/student", content=b"{not json", headers=headers)
    assert r.status_code == 400


def test_create_storage_failure_is_500_without_driver_text(client, auth_headers, store, monkeypatch):
    async def _insert(student):
        raise errors.StorageError("insert", "duplicate key value violates unique constraint")

    monkeypatch.setattr(store, "insert", _insert)
    r = client.post("/api/v1/student", json={"fname": "Ada", "lname": "Lovelace"}, headers=auth_headers())
    assert r.status_code == 500
    assert "duplicate key" not in r.text


def test_get_missing_student_is_404(client, auth_headers):
    r = client.get("/api/v1/student/does-not-exist", headers=auth_headers())
    assert r.status_code == 404


def test_get_read_failure_is_500(client, auth_headers, store, monkeypatch):
    async def _get(student_id):
        raise errors.FetchFailedError("connection reset")

    monkeypatch.setattr(store, "get", _get)
    r = client.get("/api/v1/student/abc", headers=auth_headers())
    assert r.status_code == 500
    assert "connection reset" not in r.text


@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
def test_empty_student_id_is_400_before_storage(client, auth_headers, store, monkeypatch, method):
    async def _unexpected(*args, **kwargs):
        raise AssertionError("storage must not be called")

    for name in ("get", "update", "delete"):
        monkeypatch.setattr(store, name, _unexpected)

    r = client.request(method, "/api/v1/student/", headers=auth_headers())
    assert r.status_code == 400
    assert r.json()["detail"] == "Student ID is required."


def test_empty_student_id_still_requires_token(client):
    r = client.get("/api/v1/student/")
    assert r.status_code == 401


def test_blank_student_id_is_400(client, auth_headers):
    r = client.get("/api/v1/student/%20", headers=auth_headers())
    assert r.status_code == 400


def test_update_preserves_identity_and_creation_audit(client, auth_headers):
    created = _create(client, auth_headers("alice"), email="ada@example.com")

    r = client.put(
        f"/api/v1/student/{created['id']}",
        json={"fname": "Augusta Ada", "lname": "King", "dateofbirth": "10-12-1815"},
        headers=auth_headers("bob"),
    )
    assert r.status_code == 200, r.text
    updated = r.json()
    assert updated["id"] == created["id"]
    assert updated["createdby"] == "alice"
    assert updated["createdon"] == created["createdon"]
    assert updated["updatedby"] == "bob"
    assert updated["fname"] == "Augusta Ada"
    assert updated["lname"] == "King"
    # Omitted on update means unset.
    assert updated["email"] is None
    assert _timestamp(updated["updatedon"]) > _timestamp(created["createdon"])

    fetched = client.get(f"/api/v1/student/{created['id']}", headers=auth_headers()).json()
    assert fetched == updated


def test_update_ignores_client_audit_fields(client, auth_headers):
    created = _create(client, auth_headers("alice"))
    r = client.put(
        f"/api/v1/student/{created['id']}",
        json={"fname": "Ada", "lname": "Lovelace", "createdby": "mallory", "updatedby": "mallory", "id": "other"},
        headers=auth_headers("bob"),
    )
    assert r.status_code == 200
    body = r.json()
    assert body["id"] == created["id"]
    assert body["createdby"] == "alice"
    assert body["updatedby"] == "bob"


def test_update_missing_student_reports_success(client, auth_headers):
    r = client.put(
        "/api/v1/student/ghost",
        json={"fname": "Ada", "lname": "Lovelace"},
        headers=auth_headers("bob"),
    )
    assert r.status_code == 200
    assert r.json()["id"] == "ghost"
    assert client.get("/api/v1/student/ghost", headers=auth_headers()).status_code == 404


def test_update_validation_failure_is_400(client, auth_headers):
    created = _create(client, auth_headers())
    r = client.put(
        f"/api/v1/student/{created['id']}",
        json={"fname": "Ada", "lname": "Lovelace", "dateofbirth": "31-02-1815"},
        headers=auth_headers(),
    )
    assert r.status_code == 400


def test_delete_is_idempotent(client, auth_headers):
    headers = auth_headers()
    created = _create(client, headers)
    path = f"/api/v1/student/{created['id']}"

    first = client.delete(path, headers=headers)
    second = client.delete(path, headers=headers)
    assert first.status_code == 200
    assert first.json() == {"message": "Successfully Deleted"}
    assert second.status_code == 200

    assert client.get(path, headers=headers).status_code == 404


def test_list_empty_store(client, auth_headers):
    r = client.get("/api/v1/students", headers=auth_headers())
    assert r.status_code == 200
    assert r.json() == []


def test_list_is_capped_at_ten(client, auth_headers):
    headers = auth_headers()
    for i in range(12):
        _create(client, headers, fname=f"Student{i}")

    r = client.get("/api/v1/students", headers=headers)
    assert r.status_code == 200
    assert len(r.json()) == 10


def test_list_read_failure_is_500(client, auth_headers, store, monkeypatch):
    async def _list(*, limit):
        raise errors.FetchFailedError("timeout")

    monkeypatch.setattr(store, "list_students", _list)
    r = client.get("/api/v1/students", headers=auth_headers())
    assert r.status_code == 500


def test_responses_use_lowercase_wire_names(client, auth_headers, store):
    created = _create(client, auth_headers())
    assert set(created) == {
        "id",
        "fname",
        "lname",
        "email",
        "gender",
        "address",
        "dateofbirth",
        "createdby",
        "createdon",
        "updatedby",
        "updatedon",
    }
    stored = store._rows[created["id"]]
    assert isinstance(stored, Student)


def test_memory_backend_lifespan(monkeypatch, auth_headers):
    monkeypatch.setenv("STUDENT_STORE", "memory")
    with TestClient(create_app()) as client:
        assert client.get("/ready").status_code == 200
        created = _create(client, auth_headers("alice"))
        assert client.get(f"/api/v1/student/{created['id']}", headers=auth_headers()).status_code == 200
