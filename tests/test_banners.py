import pytest
from sqlalchemy.exc import IntegrityError

from shopcore.models import TopBanner


def _create(client, headers, title, active):
    response = client.post("/api/v1/banners", json={"title": title, "isActive": active}, headers=headers)
    assert response.status_code == 201
    return response.get_json()["data"]["banner"]


def _all(client, headers):
    response = client.get("/api/v1/banners/admin", headers=headers)
    assert response.status_code == 200
    return {b["title"]: b["isActive"] for b in response.get_json()["data"]["banners"]}


def test_creating_second_active_banner_deactivates_first(client, admin_headers):
    _create(client, admin_headers, "A", True)
    _create(client, admin_headers, "B", True)

    assert _all(client, admin_headers) == {"A": False, "B": True}
    public = client.get("/api/v1/banners").get_json()["data"]["banners"]
    assert [b["title"] for b in public] == ["B"]


def test_inactive_create_leaves_active_banner_alone(client, admin_headers):
    _create(client, admin_headers, "A", True)
    _create(client, admin_headers, "B", False)
    assert _all(client, admin_headers) == {"A": True, "B": False}


def test_update_to_active_deactivates_others(client, admin_headers):
    _create(client, admin_headers, "A", True)
    b = _create(client, admin_headers, "B", False)

    response = client.put(f"/api/v1/banners/{b['id']}", json={"isActive": True, "title": "B2"}, headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["banner"]["title"] == "B2"
    assert _all(client, admin_headers) == {"A": False, "B2": True}


def test_toggle_flips_and_keeps_single_active(client, admin_headers):
    a = _create(client, admin_headers, "A", True)
    b = _create(client, admin_headers, "B", False)

    response = client.patch(f"/api/v1/banners/{b['id']}/toggle", headers=admin_headers)
    assert response.status_code == 200
    assert response.get_json()["data"]["banner"]["isActive"] is True
    assert _all(client, admin_headers) == {"A": False, "B": True}

    client.patch(f"/api/v1/banners/{b['id']}/toggle", headers=admin_headers)
    assert _all(client, admin_headers) == {"A": False, "B": False}

    client.patch(f"/api/v1/banners/{a['id']}/toggle", headers=admin_headers)
    assert _all(client, admin_headers) == {"A": True, "B": False}


def test_any_sequence_leaves_at_most_one_active(client, admin_headers):
    ids = [_create(client, admin_headers, f"T{i}", i % 2 == 0)["id"] for i in range(5)]
    for banner_id in ids[::-1]:
        client.patch(f"/api/v1/banners/{banner_id}/toggle", headers=admin_headers)
        client.put(f"/api/v1/banners/{banner_id}", json={"isActive": True}, headers=admin_headers)
        states = _all(client, admin_headers)
        assert sum(states.values()) == 1


def test_database_rejects_two_active_rows(app):
    get_session = app.extensions["store_components"]["banner_service"]._session_factory
    with pytest.raises(IntegrityError):
        with get_session() as session:
            session.add(TopBanner(title="one", is_active=True))
            session.add(TopBanner(title="two", is_active=True))


def test_banner_admin_routes_require_auth(app):
    anonymous = app.test_client()
    assert anonymous.get("/api/v1/banners/admin").status_code == 401
    assert anonymous.post("/api/v1/banners", json={"title": "x"}).status_code == 401
    assert anonymous.get("/api/v1/banners").status_code == 200


def test_missing_banner_is_404(client, admin_headers):
    response = client.patch("/api/v1/banners/nope/toggle", headers=admin_headers)
    assert response.status_code == 404
    assert response.get_json() == {"success": False, "message": "Banner not found"}


def test_delete_banner(client, admin_headers):
    a = _create(client, admin_headers, "A", True)
    assert client.delete(f"/api/v1/banners/{a['id']}", headers=admin_headers).status_code == 200
    assert _all(client, admin_headers) == {}
