import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.services.product_service import ProductNotFoundError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str, errors: list = None) -> JSONResponse:
    content = {"code": status_code, "message": message}
    if errors is not None:
        content["errors"] = errors
    return JSONResponse(status_code=status_code, content=content)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Report invalid query, body or path parameters as a 400.

    Messages are grouped per offending field:
    `{"field": "name", "location": "body", "messages": [...]}`.
    """
    grouped = {}
    for error in exc.errors():
        loc = error.get("loc", ())
        location = str(loc[0]) if loc else "request"
        field = ".".join(str(part) for part in loc[1:]) or location
        grouped.setdefault((field, location), []).append(error.get("msg", "Invalid value"))

    errors = [
        {"field": field, "location": location, "messages": messages}
        for (field, location), messages in grouped.items()
    ]
    return error_response(status.HTTP_400_BAD_REQUEST, "Validation Error", errors)


async def not_found_exception_handler(request: Request, exc: ProductNotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "Product does not exist")


async def persistence_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(
        f"Datastore error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ProductNotFoundError, not_found_exception_handler)
    app.add_exception_handler(SQLAlchemyError, persistence_exception_handler)
