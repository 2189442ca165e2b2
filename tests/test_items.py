"""Listings: create, fetch, search, status and soft delete."""
import io


def test_create_item_returns_listing(client, seller, category, make_item):
    user, headers = seller
    item = make_item(
        headers,
        brand="IKEA",
        year_of_purchase=2019,
        image_urls=["https://img.example.com/a.jpg", "https://img.example.com/b.jpg"],
    )

    assert item["title"] == "Wooden dining table"
    assert item["status"] == "available"
    assert item["seller_id"] == user["id"]
    assert item["category"]["id"] == category["id"]
    assert item["views"] == 0
    assert [img["is_primary"] for img in item["images"]] == [True, False]
    assert [img["order"] for img in item["images"]] == [0, 1]


def test_create_item_increments_items_listed(client, seller, make_item):
    user, headers = seller
    make_item(headers)
    make_item(headers, title="Office chair")

    profile = client.get(f"/api/users/{user['id']}/profile").json()
    assert profile["items_listed"] == 2


def test_create_item_requires_auth(client, category):
    response = client.post(
        "/api/items/",
        json={"title": "Lamp", "price": 10, "category_id": category["id"]},
    )
    assert response.status_code == 401


def test_create_item_unknown_category(client, seller):
    _, headers = seller
    response = client.post(
        "/api/items/",
        json={"title": "Lamp", "price": 10, "category_id": 999},
        headers=headers,
    )
    assert response.status_code == 404


def test_create_item_rejects_inactive_category(client, seller, admin, category):
    _, admin_headers = admin
    client.delete(f"/api/categories/{category['id']}", headers=admin_headers)

    _, headers = seller
    response = client.post(
        "/api/items/",
        json={"title": "Lamp", "price": 10, "category_id": category["id"]},
        headers=headers,
    )
    assert response.status_code == 404


def test_create_item_rejects_non_positive_price(client, seller, category):
    _, headers = seller
    response = client.post(
        "/api/items/",
        json={"title": "Lamp", "price": 0, "category_id": category["id"]},
        headers=headers,
    )
    assert response.status_code == 422


def test_get_item_counts_views(client, item):
    first = client.get(f"/api/items/{item['id']}")
    second = client.get(f"/api/items/{item['id']}")
    assert first.status_code == 200
    assert first.json()["views"] == 1
    assert second.json()["views"] == 2


def test_get_missing_item(client):
    response = client.get("/api/items/9999")
    assert response.status_code == 404
    assert response.json()["detail"] == "Item not found"


def test_update_item_owner_only(client, item, seller, buyer):
    _, buyer_headers = buyer
    response = client.put(
        f"/api/items/{item['id']}", json={"price": 1}, headers=buyer_headers
    )
    assert response.status_code == 403

    _, seller_headers = seller
    response = client.put(
        f"/api/items/{item['id']}",
        json={"price": 120000, "is_negotiable": False},
        headers=seller_headers,
    )
    assert response.status_code == 200
    assert response.json()["price"] == 120000
    assert response.json()["is_negotiable"] is False
    assert response.json()["title"] == item["title"]


def test_update_item_rejects_null_required_fields(client, item, seller):
    _, headers = seller
    for field in ("title", "price", "category_id"):
        response = client.put(f"/api/items/{item['id']}", json={field: None}, headers=headers)
        assert response.status_code == 422

    unchanged = client.get(f"/api/items/{item['id']}").json()
    assert unchanged["title"] == "Wooden dining table"
    assert unchanged["price"] == 150000


def test_mark_sold_sets_status_and_counters(client, item, seller):
    user, headers = seller
    response = client.put(
        f"/api/items/{item['id']}/status", json={"status": "sold"}, headers=headers
    )
    assert response.status_code == 200
    assert response.json()["status"] == "sold"
    assert response.json()["sold_at"] is not None

    profile = client.get(f"/api/users/{user['id']}/profile").json()
    assert profile["items_sold"] == 1


def test_status_change_owner_only(client, item, buyer):
    _, headers = buyer
    response = client.put(
        f"/api/items/{item['id']}/status", json={"status": "reserved"}, headers=headers
    )
    assert response.status_code == 403


def test_soft_delete_hides_item_from_search(client, item, seller):
    _, headers = seller
    response = client.delete(f"/api/items/{item['id']}", headers=headers)
    assert response.status_code == 204

    # still fetchable by id, flagged as deleted
    fetched = client.get(f"/api/items/{item['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["status"] == "deleted"

    listing = client.get("/api/items/").json()
    assert listing["total"] == 0

    mine = client.get(f"/api/items/seller/{item['seller_id']}").json()
    assert mine == []

    status_change = client.put(
        f"/api/items/{item['id']}/status", json={"status": "available"}, headers=headers
    )
    assert status_change.status_code == 400


def test_delete_item_owner_only(client, item, buyer):
    _, headers = buyer
    assert client.delete(f"/api/items/{item['id']}", headers=headers).status_code == 403


def test_search_filters(client, seller, make_item):
    _, headers = seller
    make_item(headers, title="Samsung TV", price=300000, brand="Samsung", condition="like_new")
    make_item(headers, title="Sofa set", price=250000, location="Musanze")
    make_item(headers, title="Kettle", price=15000, condition="fair")

    by_keyword = client.get("/api/items/", params={"keyword": "samsung"}).json()
    assert [i["title"] for i in by_keyword["items"]] == ["Samsung TV"]

    by_price = client.get(
        "/api/items/", params={"min_price": 20000, "max_price": 260000}
    ).json()
    assert [i["title"] for i in by_price["items"]] == ["Sofa set"]

    by_condition = client.get("/api/items/", params={"condition": "fair"}).json()
    assert [i["title"] for i in by_condition["items"]] == ["Kettle"]

    by_location = client.get("/api/items/", params={"location": "musanze"}).json()
    assert [i["title"] for i in by_location["items"]] == ["Sofa set"]


def test_search_sorting(client, seller, make_item):
    _, headers = seller
    make_item(headers, title="Mid", price=200)
    make_item(headers, title="Cheap", price=100)
    make_item(headers, title="Pricey", price=300)

    asc = client.get("/api/items/", params={"sort": "price_asc"}).json()
    assert [i["title"] for i in asc["items"]] == ["Cheap", "Mid", "Pricey"]

    desc = client.get("/api/items/", params={"sort": "price_desc"}).json()
    assert [i["title"] for i in desc["items"]] == ["Pricey", "Mid", "Cheap"]


def test_search_defaults_to_available(client, seller, make_item):
    _, headers = seller
    make_item(headers, title="Still here")
    sold = make_item(headers, title="Gone")
    client.put(f"/api/items/{sold['id']}/status", json={"status": "sold"}, headers=headers)

    default = client.get("/api/items/").json()
    assert [i["title"] for i in default["items"]] == ["Still here"]

    sold_only = client.get("/api/items/", params={"status": "sold"}).json()
    assert [i["title"] for i in sold_only["items"]] == ["Gone"]


def test_search_pagination(client, seller, make_item):
    _, headers = seller
    for n in range(5):
        make_item(headers, title=f"Item number {n}")

    page = client.get("/api/items/", params={"page": 2, "page_size": 2}).json()
    assert page["total"] == 5
    assert page["pages"] == 3
    assert page["page"] == 2
    assert len(page["items"]) == 2

    too_big = client.get("/api/items/", params={"page_size": 1000})
    assert too_big.status_code == 422


def test_seller_items_and_status_filter(client, seller, buyer, make_item):
    seller_user, seller_headers = seller
    _, buyer_headers = buyer
    make_item(seller_headers, title="Bookshelf")
    reserved = make_item(seller_headers, title="Desk")
    make_item(buyer_headers, title="Not mine")
    client.put(
        f"/api/items/{reserved['id']}/status", json={"status": "reserved"}, headers=seller_headers
    )

    response = client.get(f"/api/items/seller/{seller_user['id']}")
    assert {i["title"] for i in response.json()} == {"Bookshelf", "Desk"}

    response = client.get(
        f"/api/items/seller/{seller_user['id']}", params={"status": "reserved"}
    )
    assert [i["title"] for i in response.json()] == ["Desk"]


def test_similar_items_same_category(client, admin, seller, make_item, category):
    _, admin_headers = admin
    other = client.post(
        "/api/categories/",
        json={"name": "Electronics", "slug": "electronics"},
        headers=admin_headers,
    ).json()

    _, headers = seller
    base = make_item(headers, title="Oak table")
    make_item(headers, title="Pine table")
    make_item(headers, title="Radio", category_id=other["id"])

    response = client.get(f"/api/items/{base['id']}/similar")
    assert response.status_code == 200
    assert [i["title"] for i in response.json()] == ["Pine table"]


def test_upload_item_images(client, item, seller, buyer):
    files = [("files", ("photo.png", io.BytesIO(b"\x89PNG fake"), "image/png"))]

    _, buyer_headers = buyer
    denied = client.post(f"/api/items/{item['id']}/images", files=files, headers=buyer_headers)
    assert denied.status_code == 403

    _, headers = seller
    files = [("files", ("photo.png", io.BytesIO(b"\x89PNG fake"), "image/png"))]
    response = client.post(f"/api/items/{item['id']}/images", files=files, headers=headers)
    assert response.status_code == 200
    images = response.json()["images"]
    assert len(images) == 1
    assert images[0]["is_primary"] is True
    assert images[0]["url"].endswith(".png")
    assert "/uploads/" in images[0]["url"]
