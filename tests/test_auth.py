from services.auth_service.repository import UserRepository

from conftest import auth_headers, make_user


async def test_register_login_and_me(client, db, notifier):
    registered = await client.post(
        "/api/auth/register",
        json={"name": "Carol", "email": "carol@shopper.io", "password": "s3cret!"},
    )
    assert registered.status_code == 201
    assert registered.json()["role"] == "customer"
    assert notifier.sent == [("welcome", "carol@shopper.io")]

    login = await client.post(
        "/api/auth/login", json={"email": "carol@shopper.io", "password": "s3cret!"}
    )
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.json()["email"] == "carol@shopper.io"


async def test_duplicate_email_and_bad_password(client, db):
    payload = {"name": "Carol", "email": "carol@shopper.io", "password": "s3cret!"}
    await client.post("/api/auth/register", json=payload)

    duplicate = await client.post("/api/auth/register", json=payload)
    wrong = await client.post("/api/auth/login", json={"email": payload["email"], "password": "nope"})

    assert duplicate.status_code == 409
    assert wrong.status_code == 401


async def test_welcome_email_failure_does_not_block_registration(client, db, notifier):
    notifier.fail = True

    response = await client.post(
        "/api/auth/register",
        json={"name": "Dave", "email": "dave@shopper.io", "password": "s3cret!"},
    )

    assert response.status_code == 201


async def test_garbage_token_is_rejected(client, db):
    response = await client.get("/api/auth/me", headers={"Authorization": "Bearer not.a.jwt"})

    assert response.status_code == 401


async def test_me_uses_token_subject(client, db):
    user = await make_user(db, email="erin@shopper.io", name="Erin")

    response = await client.get("/api/auth/me", headers=auth_headers(user))

    assert response.json()["id"] == user.id


async def test_registration_race_on_email_is_a_conflict(client, db, monkeypatch):
    payload = {"name": "Carol", "email": "carol@shopper.io", "password": "s3cret!"}
    await client.post("/api/auth/register", json=payload)

    async def not_seen_yet(session, email):
        return None

    # Both registrations pass the lookup; the unique index decides.
    monkeypatch.setattr(UserRepository, "get_by_email", staticmethod(not_seen_yet))

    response = await client.post("/api/auth/register", json=payload)

    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"
