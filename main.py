from fastapi import FastAPI
from sqlalchemy import text
import structlog

from shared.config import settings
from shared.config.database import AsyncSessionLocal, Base, IS_SQLITE, SERVICE_SCHEMAS, engine

from services.auth_service.main import auth_app
from services.auth_service.service import AuthService
from services.category_service.main import category_app
from services.product_service.main import product_app
from services.order_service.main import order_app
from services.review_service.main import review_app
from services.admin_service.main import admin_app
from services.customer_service.main import customer_app

logger = structlog.get_logger(__name__)

app = FastAPI(title="Storefront API")

@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        if not IS_SQLITE:
            for schema in SERVICE_SCHEMAS:
                await conn.execute(text(f"CREATE SCHEMA IF NOT EXISTS {schema}"))

        # Create all tables
        await conn.run_sync(Base.metadata.create_all)

    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        async with AsyncSessionLocal() as db:
            await AuthService.ensure_admin(db, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)

    logger.info("storefront.started", database="sqlite" if IS_SQLITE else "postgresql")


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "storefront", "status": "running"}


app.mount("/api/auth", auth_app)
app.mount("/api/categories", category_app)
app.mount("/api/products", product_app)
app.mount("/api/orders", order_app)
app.mount("/api/reviews", review_app)
app.mount("/api/admin", admin_app)
app.mount("/api/customers", customer_app)
