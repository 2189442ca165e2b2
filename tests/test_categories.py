"""Category hierarchy endpoints."""


def _create(client, headers, name, slug, **extra):
    response = client.post(
        "/api/categories/", json={"name": name, "slug": slug, **extra}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_requires_admin(client, make_user):
    _, headers = make_user("alice")
    response = client.post(
        "/api/categories/", json={"name": "Books", "slug": "books"}, headers=headers
    )
    assert response.status_code == 403


def test_duplicate_name_or_slug_rejected(client, admin):
    _, headers = admin
    _create(client, headers, "Books", "books")

    same_name = client.post(
        "/api/categories/", json={"name": "Books", "slug": "books-2"}, headers=headers
    )
    assert same_name.status_code == 400

    same_slug = client.post(
        "/api/categories/", json={"name": "Novels", "slug": "books"}, headers=headers
    )
    assert same_slug.status_code == 400


def test_invalid_slug_rejected(client, admin):
    _, headers = admin
    response = client.post(
        "/api/categories/", json={"name": "Books", "slug": "Books & More"}, headers=headers
    )
    assert response.status_code == 422


def test_parent_must_exist(client, admin):
    _, headers = admin
    response = client.post(
        "/api/categories/",
        json={"name": "Sofas", "slug": "sofas", "parent_id": 999},
        headers=headers,
    )
    assert response.status_code == 404


def test_list_ordered_and_soft_delete(client, admin):
    _, headers = admin
    _create(client, headers, "Kitchen", "kitchen", order=2)
    garden = _create(client, headers, "Garden", "garden", order=1)
    _create(client, headers, "Appliances", "appliances", order=2)

    names = [c["name"] for c in client.get("/api/categories/").json()]
    assert names == ["Garden", "Appliances", "Kitchen"]

    response = client.delete(f"/api/categories/{garden['id']}", headers=headers)
    assert response.status_code == 204

    names = [c["name"] for c in client.get("/api/categories/").json()]
    assert names == ["Appliances", "Kitchen"]

    everything = client.get("/api/categories/", params={"include_inactive": True}).json()
    assert len(everything) == 3

    fetched = client.get(f"/api/categories/{garden['id']}").json()
    assert fetched["is_active"] is False


def test_tree_and_children(client, admin):
    _, headers = admin
    furniture = _create(client, headers, "Furniture", "furniture")
    sofas = _create(client, headers, "Sofas", "sofas", parent_id=furniture["id"])
    _create(client, headers, "Beds", "beds", parent_id=furniture["id"])
    _create(client, headers, "Corner sofas", "corner-sofas", parent_id=sofas["id"])

    tree = client.get("/api/categories/tree").json()
    assert [node["name"] for node in tree] == ["Furniture"]
    children = tree[0]["children"]
    assert {c["name"] for c in children} == {"Sofas", "Beds"}
    sofa_node = next(c for c in children if c["name"] == "Sofas")
    assert [c["name"] for c in sofa_node["children"]] == ["Corner sofas"]

    direct = client.get(f"/api/categories/{furniture['id']}/children").json()
    assert {c["name"] for c in direct} == {"Sofas", "Beds"}


def test_tree_drops_inactive_branches(client, admin):
    _, headers = admin
    furniture = _create(client, headers, "Furniture", "furniture")
    sofas = _create(client, headers, "Sofas", "sofas", parent_id=furniture["id"])
    _create(client, headers, "Corner sofas", "corner-sofas", parent_id=sofas["id"])
    client.delete(f"/api/categories/{sofas['id']}", headers=headers)

    tree = client.get("/api/categories/tree").json()
    assert tree[0]["children"] == []


def test_search_by_name(client, admin):
    _, headers = admin
    _create(client, headers, "Kitchen Appliances", "kitchen-appliances")
    _create(client, headers, "Garden", "garden")

    response = client.get("/api/categories/search", params={"name": "kitchen"})
    assert [c["name"] for c in response.json()] == ["Kitchen Appliances"]


def test_update_category(client, admin):
    _, headers = admin
    books = _create(client, headers, "Books", "books")
    media = _create(client, headers, "Media", "media")

    self_parent = client.put(
        f"/api/categories/{books['id']}", json={"parent_id": books["id"]}, headers=headers
    )
    assert self_parent.status_code == 400

    response = client.put(
        f"/api/categories/{books['id']}",
        json={"parent_id": media["id"], "description": "Second-hand books"},
        headers=headers,
    )
    assert response.status_code == 200
    assert response.json()["parent_id"] == media["id"]
    assert response.json()["description"] == "Second-hand books"


def test_get_missing_category(client):
    assert client.get("/api/categories/9999").status_code == 404


def test_update_rejects_null_required_fields(client, admin):
    _, headers = admin
    books = _create(client, headers, "Books", "books")

    for field in ("name", "slug", "is_active"):
        response = client.put(
            f"/api/categories/{books['id']}", json={field: None}, headers=headers
        )
        assert response.status_code == 422

    # nullable columns can still be cleared
    cleared = client.put(
        f"/api/categories/{books['id']}", json={"description": None}, headers=headers
    )
    assert cleared.status_code == 200
    assert client.get(f"/api/categories/{books['id']}").json()["name"] == "Books"
