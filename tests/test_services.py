def test_owner_creates_service_in_own_shop(client, owner):
    resp = client.post(
        "/api/services",
        json={"name": "Hot Towel Shave", "category": "shave", "price": 20, "duration": 30},
        headers=owner["headers"],
    )
    assert resp.status_code == 201
    assert resp.json()["shop_id"] == owner["shop"]["id"]


def test_barber_creates_service_in_the_shop_they_work_at(client, owner, barber):
    resp = client.post(
        "/api/services",
        json={"name": "Buzz Cut", "category": "haircut", "price": 12, "duration": 15},
        headers=barber["headers"],
    )
    assert resp.status_code == 201
    assert resp.json()["shop_id"] == owner["shop"]["id"]


def test_service_creation_needs_a_shop(client, register_user):
    _, headers = register_user("barber")
    resp = client.post(
        "/api/services",
        json={"name": "Buzz Cut", "category": "haircut", "price": 12, "duration": 15},
        headers=headers,
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "You must have a shop to create services"


def test_service_validation(client, owner):
    resp = client.post(
        "/api/services",
        json={"name": "Too quick", "category": "haircut", "price": 12, "duration": 5},
        headers=owner["headers"],
    )
    assert resp.status_code == 400

    resp = client.post(
        "/api/services",
        json={"name": "Bad category", "category": "tattoo", "price": 12, "duration": 30},
        headers=owner["headers"],
    )
    assert resp.status_code == 400


def test_list_and_filter_services(client, owner, service):
    client.post(
        "/api/services",
        json={"name": "Beard Sculpt", "category": "beard", "price": 18, "duration": 20},
        headers=owner["headers"],
    )

    assert len(client.get("/api/services").json()) == 2
    beard = client.get("/api/services", params={"category": "beard"}).json()
    assert [s["name"] for s in beard] == ["Beard Sculpt"]
    assert len(client.get(f"/api/services/shop/{owner['shop']['id']}").json()) == 2


def test_get_update_and_delete_service(client, owner, service):
    assert client.get(f"/api/services/{service['id']}").json()["name"] == "Classic Cut"

    resp = client.put(f"/api/services/{service['id']}", json={"name": "Classic Scissor Cut"}, headers=owner["headers"])
    assert resp.status_code == 200
    assert resp.json()["name"] == "Classic Scissor Cut"

    assert client.delete(f"/api/services/{service['id']}", headers=owner["headers"]).status_code == 200
    assert client.get(f"/api/services/{service['id']}").status_code == 404
    assert client.get("/api/services").json() == []


def test_only_the_shop_owner_can_edit_services(client, service, customer, barber):
    _, headers = customer
    assert client.put(f"/api/services/{service['id']}", json={"price": 1}, headers=headers).status_code == 403
    assert client.delete(f"/api/services/{service['id']}", headers=barber["headers"]).status_code == 403


def test_unknown_service(client):
    assert client.get("/api/services/12345").status_code == 404


def test_update_service_rejects_null_price(client, owner, service):
    for url in (f"/api/services/{service['id']}", f"/api/shops/{owner['shop']['id']}/services/{service['id']}"):
        resp = client.put(url, json={"price": None}, headers=owner["headers"])
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Validation failed"

    assert client.get(f"/api/services/{service['id']}").json()["price"] == 25.0
