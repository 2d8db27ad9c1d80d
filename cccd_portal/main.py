import logging
from datetime import timedelta
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from .config import Settings, get_settings
from .database import build_engine, build_session_factory, get_db, init_db
from .exceptions import PortalError
from .logging_config import configure_logging
from .routers import admin, auth, files, uploads
from .services.accounts import SessionPolicy
from .services.storage import build_storage_gateway
from .utils.security import build_password_context

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        return JSONResponse(
            status_code=exc.status_code, content={"detail": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ):
        return JSONResponse(
            status_code=400,
            content={
                "detail": "Validation failed",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled error on %s %s", request.method, request.url.path
        )
        return JSONResponse(
            status_code=500, content={"detail": "Internal server error"}
        )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="CCCD Submission Portal",
        description="API for uploading identity documents and reviewing them",
        version="1.0.0",
    )

    # Shared collaborators, built once per process
    engine = build_engine(settings.database_url)
    init_db(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.storage = build_storage_gateway(settings)
    app.state.pwd_context = build_password_context(settings.bcrypt_rounds)
    app.state.session_policy = SessionPolicy(
        expires_in=timedelta(days=settings.session_expire_days),
        update_age=timedelta(hours=settings.session_update_age_hours),
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    # Include routers
    app.include_router(auth.router)
    app.include_router(uploads.router)
    app.include_router(files.router)
    app.include_router(admin.router)

    @app.get("/")
    def root():
        return {"message": "CCCD Submission Portal is running"}

    @app.get("/api/health")
    def health(db: Session = Depends(get_db)):
        try:
            db.execute(text("SELECT 1"))
        except Exception as e:
            logger.error("Database health check failed: %s", e)
            raise HTTPException(status_code=503, detail="database unavailable")
        return {"status": "ok", "db": "ok"}

    return app
