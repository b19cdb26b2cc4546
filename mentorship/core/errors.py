import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


def internal_error(db: Session | None, detail: str, exc: SQLAlchemyError) -> HTTPException:
    """Roll back, log and build the 500 for a failed store call."""
    if db is not None:
        db.rollback()
    logger.exception('%s: %s', detail, exc.__class__.__name__)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return 'Invalid request.'

    first = errors[0]
    # The loc of a decode error ends in a character offset, not a field name.
    if first.get('type') == 'json_invalid':
        return 'Invalid JSON body.'

    cause = first.get('ctx', {}).get('error')
    if isinstance(cause, ValueError):
        return str(cause)

    location = '.'.join(str(part) for part in first.get('loc', ()) if part != 'body')
    if location:
        return f"{location}: {first.get('msg', 'Invalid value')}"
    return first.get('msg', 'Invalid request.')


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={'message': exc.detail},
        headers=getattr(exc, 'headers', None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={'message': validation_message(exc)},
    )
