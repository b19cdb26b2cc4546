import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from mentorship.core import config
from mentorship.core.errors import http_exception_handler, validation_exception_handler
from mentorship.database import init_db
from mentorship.routes import (
    admin_routes,
    auth_routes,
    availability_routes,
    mentor_routes,
    protected_routes,
    session_routes,
)

logging.basicConfig(level=config.LOG_LEVEL)

app = FastAPI(title='Mentorship API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    if config.uses_default_secret():
        logger.warning('JWT_SECRET_KEY is not set; tokens are signed with the built-in fallback secret.')

    try:
        init_db()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL.')


@app.get('/')
def root():
    return {'status': 'Mentorship API is live'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(mentor_routes.router, prefix='/auth')
app.include_router(session_routes.router, prefix='/auth')
app.include_router(availability_routes.router, prefix='/auth')
app.include_router(admin_routes.router, prefix='/auth')
app.include_router(protected_routes.router, prefix='/protected')
