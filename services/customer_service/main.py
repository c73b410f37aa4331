from fastapi import FastAPI

from shared.errors import register_error_handlers
from shared.observability import setup_observability
from .router import router, public_router

customer_app = FastAPI(title="Customer Service", version="1.0.0")

setup_observability(customer_app, "customer_service")
register_error_handlers(customer_app)

customer_app.include_router(public_router)
customer_app.include_router(router)
