from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base

from . import settings

DATABASE_URL = settings.DATABASE_URL

# One Postgres schema per service to keep the microservice boundaries visible.
SERVICE_SCHEMAS = (
    "auth_schema",
    "product_schema",
    "order_schema",
    "review_schema",
)

IS_SQLITE = DATABASE_URL.startswith("sqlite")

engine = create_async_engine(DATABASE_URL, echo=settings.DB_ECHO)

# SQLite has no schemas: every service table lands in the main database.
if IS_SQLITE:
    engine = engine.execution_options(
        schema_translate_map={schema: None for schema in SERVICE_SCHEMAS}
    )

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)

Base = declarative_base()


async def get_db():
    async with AsyncSessionLocal() as session:
        yield session
