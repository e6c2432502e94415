# server/main.py

import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from api import auth, rest, schema
from core.catalog import SchemaCatalog
from core.config import Settings, configure_logging, load_settings
from core.envelope import failure, success
from core.errors import MiniBaseError
from core.executor import CrudExecutor
from core.raw_sql import RawSqlConsole
from core.security import CredentialService, get_password_hash
from database import create_db_engine, create_session_factory, init_db


logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI):

    @app.exception_handler(MiniBaseError)
    async def handle_minibase_error(request: Request, exc: MiniBaseError):
        return JSONResponse(status_code=exc.status_code, content=failure(exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content=failure("Invalid request"))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content=failure(str(exc.detail)))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(status_code=500, content=failure("Internal server error"))


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Builds the application. The engine and services are created once here
    and shared by all requests through app.state.

    Run with: uvicorn main:create_app --factory
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    credentials = CredentialService(settings.jwt_secret_key, settings.access_token_expire_minutes)
    engine = create_db_engine(settings.database_url)
    init_db(engine, settings.admin_bootstrap_password, get_password_hash)
    catalog = SchemaCatalog(engine)

    app = FastAPI(title="MiniBase")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.catalog = catalog
    app.state.executor = CrudExecutor(engine, catalog)
    app.state.raw_sql = RawSqlConsole(engine)
    app.state.credentials = credentials

    # Bearer tokens only, no cookies
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    @app.get("/health")
    def health():
        return success({"status": "ok"})

    app.include_router(auth.router)
    app.include_router(rest.router)
    app.include_router(schema.router)

    logger.info("MiniBase started with database %s", engine.url.render_as_string(hide_password=True))
    return app
