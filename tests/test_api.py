from io import BytesIO

import pandas as pd
import pytest
from fastapi.testclient import TestClient

import deps
from main import app
from surgery_scheduler.rooms import MemoryKeyValue, RoomAssignmentStore
from surgery_scheduler.store import InMemoryCaseStore, InMemoryProfessorStore


def _provide(store):
    return lambda: store


@pytest.fixture
def client():
    stores = {
        deps.get_case_store: InMemoryCaseStore(),
        deps.get_professor_store: InMemoryProfessorStore(),
        deps.get_room_store: RoomAssignmentStore(MemoryKeyValue()),
    }
    for dep, store in stores.items():
        app.dependency_overrides[dep] = _provide(store)
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def _create(client, **kw):
    body = {"date": "2024-03-05", "patient_name": "Ali Veli", "operation": "Sol NX"}
    body.update(kw)
    r = client.post("/api/cases/", json=body)
    assert r.status_code == 200, r.text
    return r.json()


def test_root(client):
    assert client.get("/").json()["docs"] == "/docs"


def test_case_crud(client):
    created = _create(client, professor="Ahmet Hoca", is_mdp=True)
    case_id = created["id"]
    assert created["urine"] == "Steril"
    assert created["is_mdp"] is True

    r = client.patch(f"/api/cases/{case_id}", json={"is_remaining": True, "note": "kan hazır"})
    assert r.status_code == 200
    assert r.json()["is_remaining"] is True
    assert r.json()["professor"] == "Ahmet Hoca"

    assert client.get(f"/api/cases/{case_id}").json()["note"] == "kan hazır"
    assert client.delete(f"/api/cases/{case_id}").json() == {"ok": True}
    assert client.get(f"/api/cases/{case_id}").status_code == 404
    assert client.delete(f"/api/cases/{case_id}").status_code == 404


def test_create_validation(client):
    r = client.post("/api/cases/", json={"date": "05.03.2024", "patient_name": "A", "operation": "URS"})
    assert r.status_code == 422
    r = client.post("/api/cases/", json={"date": "2024-03-05", "patient_name": "", "operation": "URS"})
    assert r.status_code == 422


def test_patch_rejects_null_for_required_fields_and_flags(client):
    case_id = _create(client, is_kg=True)["id"]
    for body in ({"is_kg": None}, {"patient_name": None}, {"date": None}, {"operation": None}):
        r = client.patch(f"/api/cases/{case_id}", json=body)
        assert r.status_code == 422, body

    stored = client.get(f"/api/cases/{case_id}").json()
    assert stored["is_kg"] is True
    assert stored["patient_name"] == "Ali Veli"

    r = client.patch(f"/api/cases/{case_id}", json={"note": None, "is_kg": False})
    assert r.status_code == 200
    assert r.json()["note"] == ""
    assert r.json()["is_kg"] is False


def test_list_filters_and_options(client):
    _create(client, date="2024-03-06", patient_name="Zeynep", operation="URS", professor="Ahmet Hoca")
    _create(client, date="2024-03-04", patient_name="Mehmet", operation="Prostat BX",
            professor="İlker Hoca", is_kg=True)
    _create(client, date="2024-03-05", patient_name="Ayşe", operation="Sağ NX",
            professor="ilker hoca", is_second_room=True)

    names = [c["patient_name"] for c in client.get("/api/cases/").json()]
    assert names == ["Mehmet", "Ayşe", "Zeynep"]

    r = client.get("/api/cases/", params={"search": "nefrektomi"})
    assert [c["patient_name"] for c in r.json()] == ["Ayşe"]

    r = client.get("/api/cases/", params={"professor": "İLKER HOCA", "kg": "no"})
    assert [c["patient_name"] for c in r.json()] == ["Ayşe"]

    r = client.get("/api/cases/", params={"room": "second"})
    assert [c["patient_name"] for c in r.json()] == ["Ayşe"]

    assert client.get("/api/cases/", params={"mdp": "maybe"}).status_code == 422

    opts = client.get("/api/cases/options").json()
    assert opts["professors"] == ["AHMET HOCA", "İLKER HOCA"]
    assert opts["operations"] == ["prostat biyopsi", "sağ nefrektomi", "urs"]

    stats = client.get("/api/cases/stats", params={"today": "2024-03-05"}).json()
    assert stats["total"] == 3
    assert stats["second_room"] == 1
    assert stats["upcoming"] == 2


def test_month_grid(client):
    for _ in range(8):
        _create(client, date="2024-03-05")
    _create(client, date="2024-03-01")

    r = client.get("/api/calendar/2024/3", params={"today": "2024-03-01", "selected": "2024-03-05"})
    body = r.json()
    assert body["offset"] == 4
    assert len(body["cells"]) == 4 + 31
    assert body["cells"][:4] == [None] * 4
    first = body["cells"][4]
    assert (first["day"], first["count"], first["severity"], first["is_today"]) == (1, 1, "low", True)
    fifth = body["cells"][8]
    assert (fifth["date"], fifth["count"], fifth["severity"]) == ("2024-03-05", 8, "medium")
    assert fifth["is_selected"] is True
    assert body["cells"][9]["severity"] == "none"

    assert client.get("/api/calendar/2024/13").status_code == 400


def test_day_view_with_rooms_and_professor(client):
    a = _create(client, patient_name="A")["id"]
    b = _create(client, patient_name="B")["id"]
    _create(client, date="2024-03-06", patient_name="C")
    client.put("/api/professors/2024-03-05", json={"professor_name": "Ahmet Hoca"})

    r = client.post("/api/rooms/toggle", json={"case_id": b, "room": 2})
    assert r.json() == {"case_id": b, "room": 2}

    r = client.get("/api/calendar/day/2024-03-05")
    assert r.status_code == 200, r.text
    day = r.json()
    assert day["label"] == "5 Mart 2024 Salı"
    assert day["professor_of_day"] == "Ahmet Hoca"
    assert day["count"] == 2
    assert [c["patient_name"] for c in day["cases"]] == ["A", "B"]
    assert day["rooms"] == {"room_1": [], "room_2": [b], "room_3": [], "unassigned": [a]}


def test_room_toggle(client):
    case_id = _create(client)["id"]
    assert client.post("/api/rooms/toggle", json={"case_id": case_id, "room": 1}).json()["room"] == 1
    assert client.post("/api/rooms/toggle", json={"case_id": case_id, "room": 3}).json()["room"] == 3
    assert client.get("/api/rooms/").json() == {case_id: 3}
    assert client.post("/api/rooms/toggle", json={"case_id": case_id, "room": 3}).json()["room"] is None
    assert client.get("/api/rooms/").json() == {}

    assert client.post("/api/rooms/toggle", json={"case_id": case_id, "room": 4}).status_code == 400
    assert client.post("/api/rooms/toggle", json={"case_id": "ghost", "room": 1}).status_code == 404


def test_room_unassign_and_prune(client):
    keep = _create(client)["id"]
    gone = _create(client)["id"]
    client.post("/api/rooms/toggle", json={"case_id": keep, "room": 1})
    client.post("/api/rooms/toggle", json={"case_id": gone, "room": 2})
    client.delete(f"/api/cases/{gone}")

    assert client.post("/api/rooms/prune").json() == {"ok": True, "removed": 1}
    assert client.get("/api/rooms/").json() == {keep: 1}
    client.delete(f"/api/rooms/{keep}")
    assert client.get("/api/rooms/").json() == {}


def test_professor_of_day(client):
    r = client.put("/api/professors/2024-03-05", json={"professor_name": " İlker Hoca "})
    assert r.json()["professor_name"] == "İlker Hoca"
    assert client.get("/api/professors/").json() == [
        {"date": "2024-03-05", "professor_name": "İlker Hoca"}
    ]
    r = client.put("/api/professors/2024-03-05", json={"professor_name": ""})
    assert r.json()["professor_name"] is None
    assert client.get("/api/professors/").json() == []


def test_import_upload(client):
    buf = BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as w:
        pd.DataFrame([
            {"HASTA ADI": "Ali Veli", "OPERASYON": "URS", "YAŞ": 50},
            {"HASTA ADI": None, "OPERASYON": "PCNL", "YAŞ": None},
        ]).to_excel(w, sheet_name="Salı", index=False)
    files = {"file": ("hafta.xlsx", buf.getvalue(),
                      "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")}
    r = client.post("/api/import/excel", params={"anchor": "2024-03-04"}, files=files)
    assert r.status_code == 200, r.text
    assert r.json() == {"added": 1, "skipped": 1, "failures": []}

    cases = client.get("/api/cases/").json()
    assert cases[0]["date"] == "2024-03-05"
    assert cases[0]["note"] == "(Yaş: 50)"

    r = client.post("/api/import/excel", params={"anchor": "2024-03-04"},
                    files={"file": ("bad.xlsx", b"not a workbook", "application/octet-stream")})
    assert r.status_code == 400


def test_exports(client):
    _create(client, patient_name="Ayşe", is_kg=True, resident="Dr. Can")
    _create(client, date="2024-03-06", patient_name="Mehmet")

    r = client.get("/api/export/csv", params={"search": "ayşe"})
    assert r.status_code == 200
    assert "attachment" in r.headers["content-disposition"]
    text = r.content.decode("utf-8")
    assert text.startswith("\ufeff")
    assert "Ayşe" in text and "Mehmet" not in text

    r = client.get("/api/export/excel")
    assert r.status_code == 200
    assert r.content[:2] == b"PK"

    r = client.get("/api/export/day/2024-03-05")
    assert r.text.endswith("Plan: Dr. Can")
    assert client.get("/api/export/day/2024-03-07").text == ""
