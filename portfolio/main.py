"""
FastAPI application entry point
"""
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from portfolio.app.api.v1 import users
from portfolio.app.core.config import Settings, settings as default_settings
from portfolio.app.core.exceptions import APIError, error_body
from portfolio.app.core.logging_config import get_logger, setup_logging
from portfolio.app.db.base import Base
from portfolio.app.db.session import make_engine, make_session_factory
from portfolio.app.services.picture_store import PictureStore
from portfolio.app.services.profile_store import JsonProfileStore

# Import models so they register with Base.metadata
import portfolio.app.models  # noqa: F401

logger = get_logger("main")


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app and its stores from an explicit Settings instance."""
    settings = settings or default_settings
    setup_logging(settings.log_level)

    app = FastAPI(
        title=f"{settings.app_name} API",
        description="Personal profile API",
        version=settings.app_version,
    )
    app.state.settings = settings
    app.state.picture_store = PictureStore(settings.pictures_dir, max_bytes=settings.max_picture_bytes)
    app.state.profile_store = None
    app.state.session_factory = None

    if settings.storage_backend == "database":
        engine = make_engine(settings.database_url)
        # Create tables if not exist (no migrations)
        Base.metadata.create_all(bind=engine)
        app.state.engine = engine
        app.state.session_factory = make_session_factory(engine)
    else:
        app.state.profile_store = JsonProfileStore(
            settings.users_file_path,
            app.state.picture_store,
            serialize_writes=settings.serialize_writes,
        )
    logger.info(
        "Storage ready backend=%s storage_dir=%s serialize_writes=%s",
        settings.storage_backend,
        settings.storage_dir,
        settings.serialize_writes,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.error, settings.is_production),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body("Invalid request", str(exc.errors()), settings.is_production),
        )

    app.include_router(users.router, prefix="/api/users", tags=["users"])

    @app.get("/")
    def read_root():
        """Root endpoint"""
        return {"message": f"{settings.app_name} API", "version": settings.app_version}

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "storage": settings.storage_backend}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=default_settings.port)
