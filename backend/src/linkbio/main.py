"""ASGI entry point: ``uvicorn linkbio.main:app``."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.staticfiles import StaticFiles

from linkbio.config import Settings, get_settings
from linkbio.infrastructure.database.connection import dispose_engine, get_engine
from linkbio.interfaces.api.v1.router import v1_router
from linkbio.interfaces.dependencies import Facade
from linkbio.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_engine()
    logger.info("%s %s started", app.title, app.version)
    yield
    await dispose_engine()
    logger.info("%s stopped", app.title)


def _add_site_routes(app: FastAPI, settings: Settings) -> None:
    """Routes served from the site root rather than under /api/v1."""
    settings.storage_path.mkdir(parents=True, exist_ok=True)
    app.mount(settings.media_url_prefix, StaticFiles(directory=settings.storage_path), name="media")

    @app.get("/health", tags=["site"])
    async def health():
        return {"status": "ok", "version": settings.app_version}

    @app.get("/sitemap.xml", include_in_schema=False)
    async def sitemap_xml(facade: Facade):
        return Response(content=await facade.sitemap_xml(), media_type="application/xml")


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Link-in-bio pages: usernames, profiles and links",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )
    app.include_router(v1_router)
    _add_site_routes(app, settings)
    return app


app = create_app()
