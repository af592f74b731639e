import traceback
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import auth, gallery, notices
from app.core.config import Settings
from app.core.errors import AppError
from app.core.logging_config import configure_logging
from app.db.session import create_db_engine, create_session_factory, init_db
from app.services.attachments import AttachmentPipeline
from app.utils.storage import LocalStorage, StorageBackend, build_storage

VERSION = "1.0.0"


def register_error_handlers(app: FastAPI, logger):
    settings: Settings = app.state.settings

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"ERROR: {request.method} {request.url} -> {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err["loc"][1:]) or "body", "message": err["msg"]}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"success": False, "message": "Validation error", "errors": errors},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail
        if exc.status_code == 404 and exc.detail == "Not Found":
            message = f"Route {request.url.path} not found"
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "message": message},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        if settings.is_development:
            logger.error(
                f"UNHANDLED: {request.method} {request.url} query={dict(request.query_params)}\n"
                + "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            )
        else:
            logger.error(
                f"UNHANDLED: {request.method} {request.url.path} -> {type(exc).__name__} "
                f"at {datetime.now(timezone.utc).isoformat()}"
            )
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Internal server error"},
        )


def create_app(settings: Settings | None = None, storage: StorageBackend | None = None) -> FastAPI:
    settings = settings or Settings.from_env()

    logger = configure_logging(settings)
    for warning in settings.check():
        logger.warning(warning)

    engine = create_db_engine(settings.database_url)
    if settings.auto_create_tables:
        init_db(engine)

    storage = storage or build_storage(settings)

    app = FastAPI(
        title="School Website Admin API",
        version=VERSION,
        description="Admin authentication, notices and gallery management",
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.attachments = AttachmentPipeline(storage, settings)

    # ⭐ Request Logging Middleware
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"REQUEST: {request.method} {request.url}")
        response = await call_next(request)
        logger.info(f"RESPONSE: {response.status_code} {request.url}")
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_error_handlers(app, logger)

    app.include_router(auth.router)
    app.include_router(notices.router)
    app.include_router(gallery.router)

    # Locally stored attachments are served straight from disk
    if isinstance(storage, LocalStorage):
        app.mount(
            "/uploads",
            StaticFiles(directory=storage.root, check_dir=False),
            name="uploads",
        )

    @app.get("/health", tags=["Root"])
    def health():
        return {
            "success": True,
            "message": "School website backend is running",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "version": VERSION,
        }

    @app.get("/api", tags=["Root"])
    def api_index():
        return {
            "success": True,
            "message": "School Website Admin Backend API",
            "version": VERSION,
            "endpoints": {
                "auth": {
                    "signin": "POST /api/auth/signin",
                    "logout": "POST /api/auth/logout",
                    "profile": "GET /api/auth/profile",
                    "verify": "GET /api/auth/verify",
                    "password": "PUT /api/auth/password",
                    "register": "POST /api/auth/register",
                    "status": "PATCH /api/auth/admins/:id/status",
                },
                "notices": {
                    "create": "POST /api/notices",
                    "getAll": "GET /api/notices",
                    "getById": "GET /api/notices/:id",
                    "update": "PUT /api/notices/:id",
                    "delete": "DELETE /api/notices/:id",
                },
                "gallery": {
                    "upload": "POST /api/gallery",
                    "getAll": "GET /api/gallery",
                    "getById": "GET /api/gallery/:id",
                    "update": "PUT /api/gallery/:id",
                    "delete": "DELETE /api/gallery/:id",
                },
            },
        }

    logger.info(f"App started ({settings.environment}, storage={storage.provider})")
    return app
