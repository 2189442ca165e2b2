"""User administration, search and profiles."""
from tests.conftest import PASSWORD


def test_get_public_user(client, make_user):
    user, _ = make_user("alice")
    response = client.get(f"/api/users/{user['id']}")
    assert response.status_code == 200
    assert response.json()["username"] == "alice"


def test_get_missing_user(client):
    response = client.get("/api/users/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_update_me(client, make_user):
    _, headers = make_user("alice")
    response = client.put(
        "/api/users/me",
        json={"first_name": "Alice", "district": "Gasabo"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["first_name"] == "Alice"
    assert response.json()["district"] == "Gasabo"


def test_search_by_name_is_case_insensitive(client, make_user):
    make_user("alice", first_name="Alice", last_name="Uwase")
    make_user("bob", first_name="Bob")

    response = client.get("/api/users/search", params={"name": "UWA"})
    assert response.status_code == 200
    assert [u["username"] for u in response.json()] == ["alice"]


def test_search_by_location(client, make_user):
    make_user("alice", province="Kigali", district="Gasabo")
    make_user("bob", province="Kigali", district="Kicukiro")
    make_user("carol", province="Northern")

    everyone = client.get("/api/users/search/location", params={"province": "Kigali"})
    assert {u["username"] for u in everyone.json()} == {"alice", "bob"}

    district = client.get(
        "/api/users/search/location", params={"province": "Kigali", "district": "Gasabo"}
    )
    assert [u["username"] for u in district.json()] == ["alice"]


def test_list_users_requires_admin(client, make_user):
    _, headers = make_user("alice")
    assert client.get("/api/users/", headers=headers).status_code == 403


def test_list_users_paginates(client, admin, make_user):
    _, headers = admin
    for name in ("alice", "bob", "carol"):
        make_user(name)

    response = client.get("/api/users/", params={"page": 1, "page_size": 2}, headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 4
    assert body["pages"] == 2
    assert len(body["items"]) == 2


def test_suspend_and_unsuspend(client, admin, make_user):
    _, admin_headers = admin
    user, headers = make_user("alice")

    response = client.put(f"/api/users/{user['id']}/suspend", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["is_active"] is False

    # existing tokens stop working and login is refused
    assert client.get("/api/auth/me", headers=headers).status_code == 403
    login = client.post(
        "/api/auth/login", json={"email": "alice@example.com", "password": PASSWORD}
    )
    assert login.status_code == 401

    stats = client.get("/api/users/stats", headers=admin_headers).json()
    assert stats == {"total_users": 2, "active_users": 1}

    response = client.put(f"/api/users/{user['id']}/unsuspend", headers=admin_headers)
    assert response.json()["is_active"] is True
    assert client.get("/api/auth/me", headers=headers).status_code == 200


def test_suspended_token_cannot_trade(client, admin, buyer, seller, item, category):
    _, admin_headers = admin
    buyer_user, headers = buyer
    seller_user, _ = seller
    client.put(f"/api/users/{buyer_user['id']}/suspend", headers=admin_headers)

    listing = client.post(
        "/api/items/",
        json={
            "title": "Desk lamp",
            "price": 5000,
            "category_id": category["id"],
            "condition": "good",
            "location": "Kigali",
        },
        headers=headers,
    )
    assert listing.status_code == 403

    offer = client.post(
        "/api/offers/", json={"item_id": item["id"], "amount": 120000}, headers=headers
    )
    assert offer.status_code == 403

    message = client.post(
        "/api/messages/", json={"receiver_id": seller_user["id"], "content": "Hi"}, headers=headers
    )
    assert message.status_code == 403

    purchase = client.post(
        "/api/transactions/",
        json={"item_id": item["id"], "amount": 150000, "payment_method": "cash"},
        headers=headers,
    )
    assert purchase.status_code == 403
    assert purchase.json()["detail"] == "Account is suspended"


def test_suspend_missing_user(client, admin):
    _, headers = admin
    assert client.put("/api/users/9999/suspend", headers=headers).status_code == 404


def test_default_profile_created_on_register(client, make_user):
    user, _ = make_user("alice")
    response = client.get(f"/api/users/{user['id']}/profile")
    assert response.status_code == 200
    profile = response.json()
    assert profile["items_listed"] == 0
    assert profile["preferred_language"] == "en"
    assert profile["email_notifications"] is True


def test_update_profile_and_preferences(client, make_user):
    _, headers = make_user("alice")

    response = client.put(
        "/api/users/me/profile",
        json={"bio": "Moving out sale", "preferred_contact_method": "phone"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["bio"] == "Moving out sale"
    assert response.json()["preferred_contact_method"] == "phone"
    assert response.json()["last_active_at"] is not None

    response = client.put(
        "/api/users/me/profile/preferences",
        json={"preferred_language": "rw", "email_notifications": False},
        headers=headers,
    )
    assert response.status_code == 200

    profile = client.get("/api/users/me/profile", headers=headers).json()
    assert profile["preferred_language"] == "rw"
    assert profile["email_notifications"] is False
    assert profile["bio"] == "Moving out sale"
