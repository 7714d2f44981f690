import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cardledger.api import (
    cards_router,
    collection_router,
    health_router,
    prices_router,
    valuations_router,
)
from cardledger.config import settings
from cardledger.db.database import init_db
from cardledger.models.errors import KnownError
from cardledger.scrapers.edhrec import BuildIdCache

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    app.state.build_id_cache = BuildIdCache(ttl=settings.edhrec_build_id_ttl_seconds)
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardledger"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(request: Request, exc: KnownError) -> JSONResponse:
    """Render every known failure as {"failure": {kind, message, detail}}."""
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"failure": exc.to_detail().model_dump(mode="json")},
    )


app.include_router(cards_router)
app.include_router(collection_router)
app.include_router(health_router)
app.include_router(prices_router)
app.include_router(valuations_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
