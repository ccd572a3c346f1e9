# portfolio/main.py
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.staticfiles import StaticFiles

from portfolio.api import admin, profile, projects, public, skills, social_links, work_history
from portfolio.config import settings
from portfolio.singletons import bootstrap_from_disk
from portfolio.domain.errors import (
    ConflictError,
    FileIOError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from pydantic import ValidationError as PydanticValidationError

LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_FILE = LOG_DIR / "portfolio.log"


def _configure_logging():
    logger = logging.getLogger("portfolio")
    logger.setLevel(settings.log_level)
    if not logger.handlers:
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s - %(message)s")

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(fmt)
        logger.addHandler(stream_handler)

        try:
            LOG_DIR.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=5)
            file_handler.setFormatter(fmt)
            logger.addHandler(file_handler)
        except OSError as exc:
            logger.warning("Failed to initialize file logging at %s: %s", LOG_FILE, exc)

    logger.propagate = False
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)

def create_app() -> FastAPI:
    _configure_logging()
    logger = logging.getLogger("portfolio")
    logger.info("[files] serving uploads from %s", settings.upload_root)

    app = FastAPI(title="Portfolio")

    @app.on_event("startup")
    def _load_snapshot_and_wal():
        bootstrap_from_disk()

    # Routers
    app.include_router(profile.router)
    app.include_router(projects.router)
    app.include_router(work_history.router)
    app.include_router(skills.router)
    app.include_router(social_links.router)
    app.include_router(public.router)
    app.include_router(admin.router)

    # Blobs are addressed by their stored path: /uploads/<bucket>/<name>
    app.mount("/uploads", StaticFiles(directory=str(settings.upload_root), check_dir=False), name="uploads")

    # Exception handlers
    @app.exception_handler(NotFoundError)
    async def not_found_handler(_: Request, exc: NotFoundError):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND,
                            content={"error":"NotFound","detail":exc.what})

    @app.exception_handler(ConflictError)
    async def conflict_handler(_: Request, exc: ConflictError):
        return JSONResponse(status_code=status.HTTP_409_CONFLICT,
                            content={"error":"Conflict","detail":exc.detail})

    @app.exception_handler(ValidationError)
    async def badreq_handler(_: Request, exc: ValidationError):
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST,
                            content={"error":"BadRequest","detail":exc.detail})

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(_: Request, exc: UnauthorizedError):
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED,
                            content={"error":"Unauthorized","detail":exc.detail},
                            headers={"WWW-Authenticate": "Bearer"})

    @app.exception_handler(FileIOError)
    async def file_io_handler(request: Request, exc: FileIOError):
        logger.error("[io] %s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            content={"error":"FileIOError"})

    @app.exception_handler(PydanticValidationError)
    async def pydantic_validation_handler(_: Request, exc: PydanticValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder({
                "error":"ValidationError",
                "detail":exc.errors(include_url=False, include_context=False, include_input=False),
            }),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(_: Request, exc: RequestValidationError):
        # path and query parameters, e.g. a malformed UUID in the URL
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=jsonable_encoder({
                "error":"ValidationError",
                "detail":[{k: v for k, v in e.items() if k in ("type", "loc", "msg")} for e in exc.errors()],
            }),
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.exception("[api] unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            content={"error":"InternalError"})

    return app

# Instantiate for uvicorn
app = create_app()
