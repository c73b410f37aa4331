from fastapi import FastAPI

from shared.errors import register_error_handlers
from shared.observability import setup_observability
from .router import router, public_router

admin_app = FastAPI(title="Admin Service", version="1.0.0")

setup_observability(admin_app, "admin_service")
register_error_handlers(admin_app)

admin_app.include_router(public_router)
admin_app.include_router(router)
