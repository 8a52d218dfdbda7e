"""
Exception handlers shared by every API router.

Routers translate the errors of their own service into ``HTTPException``.
Errors that can come out of any service (missing records, record store
failures, storage failures, schema validation on merged records) are mapped
here. Store failures are reported with a user-facing message chosen from
the raw error text.
"""

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dealerhub.core.logging import get_logger, get_request_id
from dealerhub.repositories.base import RecordNotFoundError, RepositoryError
from dealerhub.services.pricing.pricing_engine import PricingError
from dealerhub.services.storage.blob_storage import BlobStorageError

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Si è verificato un errore durante l'operazione"

# checked in order; the first rule with a matching keyword wins
_MESSAGE_RULES: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("permission denied", "permission", "not authorized", "row-level security"),
        "Permessi insufficienti per completare l'operazione",
    ),
    (
        ("duplicate key", "unique constraint", "already exists", "integrity"),
        "Esiste già un record con questi dati",
    ),
    (
        ("network", "connection", "timeout", "timed out", "unreachable"),
        "Impossibile contattare il database, riprovare più tardi",
    ),
)


def classify_error_message(raw_message: str) -> str:
    """Pick the user-facing message matching a raw error text."""
    lowered = raw_message.lower()
    for keywords, message in _MESSAGE_RULES:
        if any(keyword in lowered for keyword in keywords):
            return message
    return GENERIC_FAILURE_MESSAGE


def error_body(error: str, message: str, **extra) -> dict:
    return {"error": error, "message": message, "request_id": get_request_id(), **extra}


async def record_not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    logger.warning(
        "Record not found",
        method=request.method,
        path=request.url.path,
        entity=exc.entity,
        record_id=exc.record_id,
    )
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=error_body("Not Found", str(exc)),
    )


async def repository_error_handler(request: Request, exc: RepositoryError) -> JSONResponse:
    logger.error(
        "Record store failure",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        context=exc.context,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Storage Error", classify_error_message(str(exc))),
    )


async def blob_storage_error_handler(request: Request, exc: BlobStorageError) -> JSONResponse:
    client_error = exc.code in ("EMPTY_FILE", "FILE_TOO_LARGE")
    if client_error:
        logger.warning("Upload rejected", path=request.url.path, code=exc.code, context=exc.context)
    else:
        logger.error("Upload failed", path=request.url.path, code=exc.code, context=exc.context)
    return JSONResponse(
        status_code=(
            status.HTTP_400_BAD_REQUEST
            if client_error
            else status.HTTP_502_BAD_GATEWAY
        ),
        content=error_body("Upload Error", str(exc), code=exc.code),
    )


async def pricing_error_handler(request: Request, exc: PricingError) -> JSONResponse:
    logger.warning("Pricing failed", path=request.url.path, error=str(exc), context=exc.context)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("Pricing Error", str(exc)),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.warning(
        "Request validation failed",
        method=request.method,
        path=request.url.path,
        errors=exc.errors(),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            "Validation Error",
            "Request validation failed",
            details=jsonable_errors(exc.errors()),
        ),
    )


async def record_validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.warning(
        "Record validation failed",
        method=request.method,
        path=request.url.path,
        errors=exc.errors(include_url=False),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(
            "Validation Error",
            "Record validation failed",
            details=jsonable_errors(exc.errors(include_url=False)),
        ),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Internal Server Error", "An unexpected error occurred"),
    )


def jsonable_errors(errors) -> list[dict]:
    """Drop the exception objects pydantic puts in ``ctx``."""
    cleaned = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        cleaned.append(error)
    return jsonable_encoder(cleaned)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecordNotFoundError, record_not_found_handler)
    app.add_exception_handler(RepositoryError, repository_error_handler)
    app.add_exception_handler(BlobStorageError, blob_storage_error_handler)
    app.add_exception_handler(PricingError, pricing_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, record_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)
