from fastapi import FastAPI

from shared.errors import register_error_handlers
from shared.observability.setup import setup_observability

from .models import User  # noqa: F401 (registers model with SQLAlchemy Base)
from .router import router, public_router

auth_app = FastAPI(
    title="Auth Service",
    version="2.0.0",
    description="JWT authentication: register, login, token validation.",
)

setup_observability(auth_app, "auth_service")
register_error_handlers(auth_app)

auth_app.include_router(public_router)
auth_app.include_router(router)
