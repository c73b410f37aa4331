from conftest import auth_headers, make_category, make_product


async def test_admin_creates_product_in_category(client, db, admin):
    category = await make_category(db)

    response = await client.post(
        "/api/products/",
        json={
            "name": "Astrox 99",
            "description": "Head-heavy racquet",
            "price": 229.0,
            "original_price": 259.0,
            "category_id": category.id,
            "stock": 8,
            "tags": ["racquet", "attack"],
        },
        headers=auth_headers(admin),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["category"] == {"id": category.id, "name": "Racquets", "slug": "racquets"}
    assert body["stock_status"] == "low-stock"
    assert body["discount_percentage"] == 12
    assert body["average_rating"] == 0.0


async def test_product_create_rejects_unknown_category(client, db, admin):
    response = await client.post(
        "/api/products/",
        json={"name": "Orphan", "description": "x", "price": 1.0, "category_id": 77},
        headers=auth_headers(admin),
    )

    assert response.status_code == 422
    assert response.json()["field"] == "category_id"


async def test_customers_cannot_manage_products(client, db, customer):
    response = await client.post(
        "/api/products/",
        json={"name": "Nope", "description": "x", "price": 1.0},
        headers=auth_headers(customer),
    )

    assert response.status_code == 403


async def test_update_rejects_derived_fields(client, db, admin):
    product = await make_product(db)
    headers = auth_headers(admin)

    rating = await client.put(f"/api/products/{product.id}", json={"average_rating": 5.0}, headers=headers)
    nulled = await client.put(f"/api/products/{product.id}", json={"price": None}, headers=headers)
    restock = await client.put(f"/api/products/{product.id}", json={"stock": 40}, headers=headers)

    assert rating.status_code == 422
    assert nulled.status_code == 422
    assert restock.status_code == 200
    assert restock.json()["stock"] == 40


async def test_list_hides_inactive_and_paginates(client, db):
    for i in range(3):
        await make_product(db, name=f"Shuttle {i}", price=f"{10 + i}.00")
    await make_product(db, name="Retired", is_active=False)

    response = await client.get("/api/products/", params={"limit": 2, "sort": "price_asc"})

    body = response.json()
    assert [p["name"] for p in body["data"]] == ["Shuttle 0", "Shuttle 1"]
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}


async def test_list_filters_by_category_and_price(client, db):
    racquets = await make_category(db, "Racquets")
    shoes = await make_category(db, "Shoes")
    await make_product(db, name="Cheap racquet", price="40.00", category_id=racquets.id)
    await make_product(db, name="Pro racquet", price="220.00", category_id=racquets.id)
    await make_product(db, name="Court shoe", price="90.00", category_id=shoes.id)

    response = await client.get(
        "/api/products/", params={"category": racquets.id, "min_price": 100}
    )

    assert [p["name"] for p in response.json()["data"]] == ["Pro racquet"]


async def test_search_matches_name_description_and_tags(client, db):
    await make_product(db, name="Nanoflare 700", tags=["speed"])
    await make_product(db, name="Feather shuttle")

    by_tag = await client.get("/api/products/", params={"search": "SPEED"})
    by_name = await client.get("/api/products/", params={"search": "feather"})

    assert [p["name"] for p in by_tag.json()["data"]] == ["Nanoflare 700"]
    assert [p["name"] for p in by_name.json()["data"]] == ["Feather shuttle"]


async def test_featured_and_missing_product(client, db):
    await make_product(db, name="Star", is_featured=True)
    await make_product(db, name="Plain")

    featured = await client.get("/api/products/featured")
    missing = await client.get("/api/products/999")

    assert [p["name"] for p in featured.json()] == ["Star"]
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Product 999 not found", "error": "not_found", "entity": "product", "id": 999}


async def test_category_crud(client, db, admin):
    headers = auth_headers(admin)

    created = await client.post("/api/categories/", json={"name": "Bags & Cases"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["slug"] == "bags-cases"

    duplicate = await client.post("/api/categories/", json={"name": "bags & cases"}, headers=headers)
    assert duplicate.status_code == 409

    category_id = created.json()["id"]
    renamed = await client.put(f"/api/categories/{category_id}", json={"name": "Bags"}, headers=headers)
    assert renamed.json()["slug"] == "bags"

    self_parent = await client.put(
        f"/api/categories/{category_id}", json={"parent_id": category_id}, headers=headers
    )
    assert self_parent.status_code == 422

    deleted = await client.delete(f"/api/categories/{category_id}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/categories/{category_id}")).status_code == 404


async def test_category_in_use_cannot_be_deleted(client, db, admin):
    category = await make_category(db)
    await make_product(db, category_id=category.id)

    response = await client.delete(f"/api/categories/{category.id}", headers=auth_headers(admin))

    assert response.status_code == 409


async def test_categories_with_product_counts(client, db):
    racquets = await make_category(db, "Racquets")
    await make_category(db, "Shoes")
    await make_product(db, name="A", category_id=racquets.id)
    await make_product(db, name="B", category_id=racquets.id)
    await make_product(db, name="C", category_id=racquets.id, is_active=False)

    response = await client.get("/api/categories/with-counts")

    counts = {c["name"]: c["product_count"] for c in response.json()}
    assert counts == {"Racquets": 2, "Shoes": 0}


async def test_category_tree_lists_children_and_rejects_cycles(client, db, admin):
    headers = auth_headers(admin)
    sports = (await client.post("/api/categories/", json={"name": "Sports"}, headers=headers)).json()
    racquets = (
        await client.post("/api/categories/", json={"name": "Racquets", "parent_id": sports["id"]}, headers=headers)
    ).json()
    junior = (
        await client.post("/api/categories/", json={"name": "Junior", "parent_id": racquets["id"]}, headers=headers)
    ).json()

    listed = await client.get("/api/categories/")
    children = {c["name"]: [child["name"] for child in c["children"]] for c in listed.json()}
    assert children["Sports"] == ["Racquets"]
    assert children["Racquets"] == ["Junior"]

    detail = await client.get(f"/api/categories/{sports['id']}")
    assert [child["id"] for child in detail.json()["children"]] == [racquets["id"]]

    cycle = await client.put(
        f"/api/categories/{sports['id']}", json={"parent_id": junior["id"]}, headers=headers
    )
    assert cycle.status_code == 422
    assert cycle.json()["field"] == "parent_id"

    moved = await client.put(f"/api/categories/{junior['id']}", json={"parent_id": sports["id"]}, headers=headers)
    assert moved.status_code == 200
    assert moved.json()["parent_id"] == sports["id"]
