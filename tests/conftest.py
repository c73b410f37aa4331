import os
import tempfile

_tmpdir = tempfile.mkdtemp(prefix="storefront-tests-")

# Settings are read at import time, so the environment goes first.
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_tmpdir}/storefront.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["TRACING_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SMTP_HOST"] = ""
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

from decimal import Decimal

import httpx
import pytest

from main import app
from shared.config.database import AsyncSessionLocal, Base, engine
from shared.notifications import NotificationError, get_notifier
from shared.security import ROLE_ADMIN, ROLE_CUSTOMER
from shared.security.jwt_handler import create_access_token
from services.auth_service.main import auth_app
from services.auth_service.models import User
from services.category_service.models import Category, slugify
from services.order_service.main import order_app
from services.product_service.models import Product


class RecordingNotifier:
    """Stands in for EmailNotifier and remembers what would have been sent."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    async def _record(self, kind, to):
        if self.fail:
            raise NotificationError("smtp down")
        self.sent.append((kind, to))

    async def welcome(self, user):
        await self._record("welcome", user.email)

    async def order_created(self, buyer, order):
        await self._record("order_created", buyer.email)

    async def order_status_changed(self, buyer, order):
        await self._record("order_status", buyer.email)


@pytest.fixture
async def db():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        yield session
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def notifier():
    recorder = RecordingNotifier()
    for sub_app in (auth_app, order_app):
        sub_app.dependency_overrides[get_notifier] = lambda: recorder
    yield recorder
    for sub_app in (auth_app, order_app):
        sub_app.dependency_overrides.pop(get_notifier, None)


@pytest.fixture
async def client(db, notifier):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_headers(user: User) -> dict:
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


async def make_user(db, email="alice@shopper.io", name="Alice", role=ROLE_CUSTOMER, **fields) -> User:
    # Tests never log in with these accounts, so the hash is a placeholder.
    user = User(name=name, email=email, hashed_password="not-a-hash", role=role, **fields)
    db.add(user)
    await db.commit()
    return user


async def make_category(db, name="Racquets") -> Category:
    category = Category(name=name, slug=slugify(name))
    db.add(category)
    await db.commit()
    return category


async def make_product(db, name="Arcsaber 11", price="199.99", stock=5, **fields) -> Product:
    product = Product(
        name=name,
        description=f"{name} description",
        price=Decimal(price),
        stock=stock,
        **fields,
    )
    db.add(product)
    await db.commit()
    return product


async def stock_of(product_id: int) -> int:
    # Fresh session so the value comes from the database, not an identity map.
    async with AsyncSessionLocal() as session:
        product = await session.get(Product, product_id)
        return product.stock


@pytest.fixture
async def customer(db):
    return await make_user(db)


@pytest.fixture
async def other_customer(db):
    return await make_user(db, email="bob@shopper.io", name="Bob")


@pytest.fixture
async def admin(db):
    return await make_user(db, email="root@storefront.io", name="Admin", role=ROLE_ADMIN)


SHIPPING = {
    "name": "Alice",
    "street": "1 Market St",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "phone": "555-0100",
}


def order_payload(*items, payment_method="credit_card", notes=None) -> dict:
    return {
        "items": [{"product_id": pid, "quantity": qty} for pid, qty in items],
        "shipping_address": SHIPPING,
        "payment_method": payment_method,
        "notes": notes,
    }
