def _slider(client, headers, **payload):
    response = client.post("/api/v1/sliders", json=payload, headers=headers)
    assert response.status_code == 201, response.get_json()
    return response.get_json()["data"]["slider"]


def test_create_assigns_next_order_and_normalizes_url(client, admin_headers):
    first = _slider(client, admin_headers, imageUrl="uploads/sliders/a.png")
    second = _slider(client, admin_headers, imageUrl="https://cdn.example.com/b.png", internalLink="/sale")
    assert first["imageUrl"] == "/uploads/sliders/a.png"
    assert first["order"] == 1
    assert second["order"] == 2
    assert second["internalLink"] == "/sale"


def test_list_is_ordered_and_many_can_be_active(client, admin_headers):
    _slider(client, admin_headers, imageUrl="/b.png", order=5)
    _slider(client, admin_headers, imageUrl="/a.png", order=2)
    sliders = client.get("/api/v1/sliders").get_json()["data"]["sliders"]
    assert [s["imageUrl"] for s in sliders] == ["/a.png", "/b.png"]
    assert all(s["isActive"] for s in sliders)


def test_toggle_update_delete(client, admin_headers):
    slider = _slider(client, admin_headers, imageUrl="/a.png")
    toggled = client.patch(f"/api/v1/sliders/{slider['id']}/toggle", headers=admin_headers).get_json()
    assert toggled["data"]["slider"]["isActive"] is False
    assert client.get("/api/v1/sliders?active=true").get_json()["data"]["sliders"] == []

    updated = client.put(
        f"/api/v1/sliders/{slider['id']}", json={"order": 9, "imageUrl": "media/c.png"}, headers=admin_headers
    ).get_json()["data"]["slider"]
    assert updated["order"] == 9
    assert updated["imageUrl"] == "/media/c.png"

    assert client.delete(f"/api/v1/sliders/{slider['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/sliders/{slider['id']}").status_code == 404


def test_image_url_required(client, admin_headers):
    response = client.post("/api/v1/sliders", json={"internalLink": "/x"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.get_json()["errors"][0]["field"] == "imageUrl"
