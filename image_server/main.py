from contextlib import asynccontextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables as early as possible
load_dotenv()

from .application.services.image_service import ImageService
from .core.config import Settings, get_settings
from .exceptions import ImageStoreError, http_exception_handler, image_store_exception_handler
from .infrastructure.imaging.pillow_codec import PillowImageCodec
from .infrastructure.storage.local_storage import LocalStorageRepository
from .infrastructure.storage.root_resolver import resolve_storage_root
from .middleware import ErrorHandlingMiddleware, LoggingMiddleware, RequestSizeLimitMiddleware
from .routers import images_router
from .schemas.images import HealthResponse

logger = logging.getLogger(__name__)


def build_image_service(settings: Settings, storage_root: Path) -> ImageService:
    return ImageService(
        storage_repo=LocalStorageRepository(storage_root),
        codec=PillowImageCodec(jpeg_quality=settings.JPEG_QUALITY),
        default_extension=settings.DEFAULT_IMAGE_EXTENSION,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format=settings.LOG_FORMAT
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.APP_NAME}...")
        yield
        logger.info(f"Shutting down {settings.APP_NAME}...")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None)
    )

    # Resolved once; read-only for the lifetime of the process
    storage_root = resolve_storage_root(settings.UPLOAD_DIR, settings.UPLOAD_MODULE_DIR)
    logger.info(f"Image upload root resolved. configured='{settings.UPLOAD_DIR}', resolved='{storage_root}'")
    app.state.storage_root = storage_root
    app.state.image_service = build_image_service(settings, storage_root)

    app.add_exception_handler(ImageStoreError, image_store_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)

    app.add_middleware(ErrorHandlingMiddleware, debug=settings.DEBUG)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_size=settings.MAX_FILE_SIZE)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=settings.allowed_methods_list,
        allow_headers=settings.allowed_headers_list,
        max_age=settings.CORS_MAX_AGE,
    )

    app.include_router(images_router.router)

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        return HealthResponse(
            status="healthy",
            service=settings.APP_NAME,
            version=settings.APP_VERSION,
            timestamp=datetime.utcnow().isoformat(),
            storage_root=str(app.state.storage_root),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run("image_server.main:app", host=_settings.HOST, port=_settings.PORT)
