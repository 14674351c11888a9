from fastapi.testclient import TestClient

from taskforms.main import app
from tests.helpers import create_admin, create_fixed_master, create_master_list, create_user, headers

REGIONS = {
    "name": "Regions",
    "items": [{"value": "eu", "itemLabel": "Europe"}, {"value": "na", "itemLabel": "North America"}],
}


def test_create_master_list_requires_admin(db_session):
    create_user(db_session, "user@test.com")
    client = TestClient(app)
    r = client.post("/masters/lists", headers=headers("user@test.com"), json=REGIONS)
    assert r.status_code == 403


def test_master_list_crud(db_session):
    admin = create_admin(db_session)
    client = TestClient(app)

    r = client.post("/masters/lists", headers=headers(admin), json=REGIONS)
    assert r.status_code == 201
    ml = r.json()
    assert ml["items"] == REGIONS["items"]

    r = client.get("/masters/lists", headers=headers(admin))
    assert [m["name"] for m in r.json()] == ["Regions"]

    r = client.put(
        f"/masters/lists/{ml['id']}",
        headers=headers(admin),
        json={"name": "Regions", "items": [{"value": "apac", "itemLabel": "Asia Pacific"}]},
    )
    assert r.status_code == 200
    assert r.json()["items"] == [{"value": "apac", "itemLabel": "Asia Pacific"}]

    assert client.delete(f"/masters/lists/{ml['id']}", headers=headers(admin)).status_code == 204
    assert client.get(f"/masters/lists/{ml['id']}", headers=headers(admin)).status_code == 404


def test_master_list_name_must_be_unique(db_session):
    admin = create_admin(db_session)
    create_master_list(db_session, "Regions", [("eu", "Europe")])

    client = TestClient(app)
    r = client.post("/masters/lists", headers=headers(admin), json=REGIONS)
    assert r.status_code == 409


def test_master_list_item_values_must_be_unique(db_session):
    admin = create_admin(db_session)
    client = TestClient(app)
    r = client.post(
        "/masters/lists",
        headers=headers(admin),
        json={"name": "Dup", "items": [{"value": "a", "itemLabel": "A"}, {"value": "a", "itemLabel": "B"}]},
    )
    assert r.status_code == 400


def test_fixed_masters(db_session):
    admin = create_admin(db_session)
    client = TestClient(app)

    r = client.post("/masters/departments", headers=headers(admin), json={"name": "Finance"})
    assert r.status_code == 201
    entry = r.json()
    assert entry["masterType"] == "departments"

    assert client.post("/masters/departments", headers=headers(admin), json={"name": "Finance"}).status_code == 409
    assert client.post("/masters/planets", headers=headers(admin), json={"name": "Mars"}).status_code == 422

    r = client.get("/masters/departments", headers=headers(admin))
    assert [e["name"] for e in r.json()] == ["Finance"]

    # wrong type for the id
    assert client.delete(f"/masters/priorities/{entry['id']}", headers=headers(admin)).status_code == 404
    assert client.delete(f"/masters/departments/{entry['id']}", headers=headers(admin)).status_code == 204


def test_lookup_options(db_session):
    admin = create_admin(db_session)
    regions = create_master_list(db_session, "Regions", [("eu", "Europe")])
    hr = create_fixed_master(db_session, "departments", "People")

    client = TestClient(app)
    r = client.get(f"/lookups/{regions.id}", headers=headers(admin))
    assert r.json() == [{"value": "eu", "label": "Europe"}]

    r = client.get("/lookups/departments", headers=headers(admin))
    assert r.json() == [{"value": hr.id, "label": "People"}]

    # a known master with no entries yet
    assert client.get("/lookups/statuses", headers=headers(admin)).json() == []
    assert client.get("/lookups/unknown", headers=headers(admin)).status_code == 404
