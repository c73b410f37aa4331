from fastapi import FastAPI

from shared.errors import register_error_handlers
from shared.observability import setup_observability
from .router import router, public_router
from .models import Review, ReviewReport, ReviewVote  # noqa: F401 (registers models with SQLAlchemy Base)

review_app = FastAPI(title="Review Service", version="1.0.0")

setup_observability(review_app, "review_service")
register_error_handlers(review_app)

review_app.include_router(public_router)
review_app.include_router(router)
