import os
from collections.abc import AsyncGenerator, Callable
from contextlib import _AsyncGeneratorContextManager, asynccontextmanager
from typing import Any

from anyio import to_thread
from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_redoc_html, get_swagger_ui_html
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from ..api.dependencies import get_current_admin
from ..models import *  # noqa: F403
from .config import (
    AppSettings,
    CORSSettings,
    EnvironmentOption,
    EnvironmentSettings,
    StorageSettings,
)
from .db.database import Base
from .db.database import async_engine as engine
from .exceptions.http_exceptions import PaymentProviderException
from .logger import setup_logging
from .scheduler import schedule_apscheduler_job, shutdown_apscheduler


# -------------------- DATABASE --------------------
async def create_tables() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


# -------------------- THREADPOOL --------------------
async def set_threadpool_tokens(number_of_tokens: int = 100) -> None:
    to_thread.current_default_thread_limiter().total_tokens = number_of_tokens


# -------------------- EXCEPTION HANDLERS --------------------
async def payment_provider_exception_handler(request: Request, exc: PaymentProviderException) -> JSONResponse:
    # clients read has_paid even when the provider is down
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "has_paid": False})


# -------------------- LIFESPAN FACTORY --------------------
def lifespan_factory(
    settings: Any,
    create_tables_on_start: bool = True,
) -> Callable[[FastAPI], _AsyncGeneratorContextManager[Any]]:

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator:
        await set_threadpool_tokens()

        if create_tables_on_start:
            await create_tables()

        if isinstance(settings, EnvironmentSettings) and settings.SCHEDULER_ENABLED:
            schedule_apscheduler_job(app)

        yield

        shutdown_apscheduler(app)

    return lifespan


# -------------------- APPLICATION CREATOR --------------------
def create_application(
    router: APIRouter,
    settings: Any,
    create_tables_on_start: bool = True,
    lifespan: Callable[[FastAPI], _AsyncGeneratorContextManager[Any]] | None = None,
    **kwargs: Any,
) -> FastAPI:
    setup_logging()

    if isinstance(settings, AppSettings):
        kwargs.update({
            "title": settings.APP_NAME,
            "description": settings.APP_DESCRIPTION,
            "version": settings.APP_VERSION or "0.1.0",
            "contact": {"name": settings.CONTACT_NAME, "email": settings.CONTACT_EMAIL},
            "license_info": {"name": settings.LICENSE_NAME},
        })

    # docs are re-added below outside production
    if isinstance(settings, EnvironmentSettings):
        kwargs.update({"docs_url": None, "redoc_url": None, "openapi_url": None})

    if lifespan is None:
        lifespan = lifespan_factory(settings, create_tables_on_start=create_tables_on_start)

    application = FastAPI(lifespan=lifespan, **kwargs)
    application.include_router(router)
    application.add_exception_handler(PaymentProviderException, payment_provider_exception_handler)

    if isinstance(settings, CORSSettings):
        application.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    if isinstance(settings, StorageSettings):
        os.makedirs(settings.MEDIA_ROOT, exist_ok=True)
        application.mount(settings.MEDIA_URL_PREFIX, StaticFiles(directory=settings.MEDIA_ROOT), name="media")

    if isinstance(settings, EnvironmentSettings):
        if settings.ENVIRONMENT != EnvironmentOption.PRODUCTION:
            docs_router = APIRouter()

            if settings.ENVIRONMENT != EnvironmentOption.LOCAL:
                docs_router = APIRouter(dependencies=[Depends(get_current_admin)])

            @docs_router.get("/docs", include_in_schema=False)
            async def get_swagger_documentation():
                return get_swagger_ui_html(openapi_url="/openapi.json", title="docs")

            @docs_router.get("/redoc", include_in_schema=False)
            async def get_redoc_documentation():
                return get_redoc_html(openapi_url="/openapi.json", title="docs")

            @docs_router.get("/openapi.json", include_in_schema=False)
            async def openapi():
                return get_openapi(title=application.title, version=application.version, routes=application.routes)

            application.include_router(docs_router)

    return application
