"""
Domain error taxonomy shared by every service.

Services raise these; each FastAPI sub-app registers one handler that turns
them into a JSON body of the form ``{"detail": ..., "error": ..., **context}``
so clients can branch on ``error`` instead of parsing messages.
"""
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "domain_error"

    def __init__(self, message: str, **context):
        super().__init__(message)
        self.message = message
        self.context = context


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, entity: str, entity_id):
        super().__init__(
            f"{entity.capitalize()} {entity_id} not found",
            entity=entity,
            id=entity_id,
        )
        self.entity = entity
        self.entity_id = entity_id


class ProductUnavailableError(DomainError):
    code = "product_unavailable"

    def __init__(self, name: str):
        super().__init__(f"Product {name} is not available", product=name)
        self.name = name


class InsufficientStockError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "insufficient_stock"

    def __init__(self, name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for {name}",
            product=name,
            requested=requested,
            available=available,
        )
        self.name = name
        self.requested = requested
        self.available = available


class AlreadyCancelledError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "already_cancelled"

    def __init__(self):
        super().__init__("Order is already cancelled")


class TerminalStateError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "terminal_state"

    def __init__(self, state: str):
        super().__init__(f"Order is {state} and cannot change state", state=state)
        self.state = state


class FieldValidationError(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}", field=field, reason=reason)
        self.field = field
        self.reason = reason


class PermissionDeniedError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "permission_denied"


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": exc.code, **exc.context},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
