from services.product_service.models import Product
from shared.config.database import AsyncSessionLocal

from conftest import auth_headers, make_product


async def product_rating(product_id: int):
    async with AsyncSessionLocal() as session:
        product = await session.get(Product, product_id)
        return product.average_rating, product.num_reviews


async def review(client, user, product_id, rating, comment="Solid frame"):
    return await client.post(
        "/api/reviews/",
        json={"product_id": product_id, "rating": rating, "comment": comment},
        headers=auth_headers(user),
    )


async def test_reviews_drive_product_rating(client, db, customer, other_customer):
    product = await make_product(db)

    first = await review(client, customer, product.id, 5)
    assert first.status_code == 201
    assert first.json()["author"] == {"id": customer.id, "name": "Alice"}
    await review(client, other_customer, product.id, 4)

    assert await product_rating(product.id) == (4.5, 2)


async def test_one_review_per_product(client, db, customer):
    product = await make_product(db)
    await review(client, customer, product.id, 5)

    again = await review(client, customer, product.id, 1)

    assert again.status_code == 409
    assert await product_rating(product.id) == (5.0, 1)


async def test_review_for_missing_product(client, db, customer):
    response = await review(client, customer, 404, 3)

    assert response.status_code == 404


async def test_owner_edits_and_rating_follows(client, db, customer, other_customer):
    product = await make_product(db)
    created = (await review(client, customer, product.id, 2)).json()

    stranger = await client.put(
        f"/api/reviews/{created['id']}", json={"rating": 5}, headers=auth_headers(other_customer)
    )
    assert stranger.status_code == 403

    edited = await client.put(
        f"/api/reviews/{created['id']}", json={"rating": 4, "title": "Grew on me"}, headers=auth_headers(customer)
    )
    assert edited.status_code == 200
    assert edited.json()["title"] == "Grew on me"
    assert await product_rating(product.id) == (4.0, 1)

    protected = await client.put(
        f"/api/reviews/{created['id']}", json={"is_verified": True}, headers=auth_headers(customer)
    )
    assert protected.status_code == 422


async def test_admin_deletes_review_and_rating_resets(client, db, customer, admin):
    product = await make_product(db)
    created = (await review(client, customer, product.id, 3)).json()

    response = await client.delete(f"/api/reviews/{created['id']}", headers=auth_headers(admin))

    assert response.status_code == 200
    assert await product_rating(product.id) == (0.0, 0)


async def test_votes_and_reports_count_once_per_user(client, db, customer, other_customer):
    product = await make_product(db)
    created = (await review(client, customer, product.id, 5)).json()
    headers = auth_headers(other_customer)

    await client.post(f"/api/reviews/{created['id']}/helpful", json={"helpful": True}, headers=headers)
    await client.post(f"/api/reviews/{created['id']}/helpful", json={"helpful": False}, headers=headers)
    await client.post(f"/api/reviews/{created['id']}/report", json={"reason": "spam"}, headers=headers)
    await client.post(f"/api/reviews/{created['id']}/report", json={"reason": "fake"}, headers=headers)

    listed = await client.get(f"/api/reviews/product/{product.id}")
    body = listed.json()["data"][0]
    assert (body["helpful_count"], body["unhelpful_count"], body["reported_count"]) == (0, 1, 1)


async def test_my_reviews(client, db, customer, other_customer):
    first = await make_product(db, name="First")
    second = await make_product(db, name="Second")
    await review(client, customer, first.id, 5)
    await review(client, other_customer, second.id, 1)

    response = await client.get("/api/reviews/my", headers=auth_headers(customer))

    assert [r["product"]["name"] for r in response.json()["data"]] == ["First"]
