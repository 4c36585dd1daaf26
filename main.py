import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.responses import fail, ok
from api.routes.admin import router as admin_router
from api.routes.ai import router as ai_router
from api.routes.auth import router as auth_router
from api.routes.authors import router as authors_router
from api.routes.chat import router as chat_router
from api.routes.fields import router as fields_router
from api.routes.interactions import router as interactions_router
from api.routes.papers import router as papers_router
from api.routes.statistics import router as statistics_router
from api.routes.users import router as users_router
from papertrove.config import Config, Settings
from papertrove.database.db.session import Database
from papertrove.errors import AppError
from papertrove.logging_config import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, settings.log_dir, settings.log_file)

        database = Database(settings.database_url, echo=settings.database_echo)
        # Create any missing tables on startup
        database.create_all()

        app.state.settings = settings
        app.state.database = database
        logger.info(f"{settings.app_name} started ({settings.env})")
        yield
        database.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)

    # CORS 配置：开发环境允许所有来源，生产环境限制为指定来源
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.is_dev else settings.cors_origins,
        allow_credentials=not settings.is_dev,  # 使用 "*" 时不能设置 credentials=True
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Errors -> envelope ----

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        error = exc.detail if exc.status_code >= 500 else None
        return fail(exc.status_code, exc.message, error)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid {location}: {first.get('msg')}" if location else "Invalid request"
        return fail(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return fail(404, "Endpoint not found")
        return fail(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return fail(500, "Internal server error")

    # ---- Routes ----

    @app.get("/health")
    def health_check():
        return ok("PaperTrove API is running", {"status": "ok"})

    for router in (
        auth_router,
        users_router,
        papers_router,
        authors_router,
        fields_router,
        interactions_router,
        statistics_router,
        ai_router,
        admin_router,
        chat_router,
    ):
        app.include_router(router)

    # 上传的 PDF 通过 public_prefix 静态访问
    upload_dir = Path(settings.upload.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        settings.upload.public_prefix.rstrip("/"),
        StaticFiles(directory=str(upload_dir)),
        name="uploads",
    )

    return app


app = create_app()
