import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ygodeck.api import decks_router, health_router, reference_router, search_router
from ygodeck.config import settings
from ygodeck.models.failure import (
    KnownError,
    RefusalError,
    create_known_failure,
    create_refusal,
    create_unknown_failure,
)
from ygodeck.services.card_catalog import CardCatalog
from ygodeck.services.deck_session import DeckSession
from ygodeck.services.reference_data import ReferenceDataStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the reference store, catalog client and deck session for this process."""
    store = ReferenceDataStore(settings.data_dir, source_url=settings.reference_data_url)
    async with httpx.AsyncClient(timeout=settings.card_api_timeout) as client:
        app.state.reference_store = store
        app.state.card_catalog = CardCatalog(
            settings.card_api_url, timeout=settings.card_api_timeout, client=client
        )
        app.state.deck_session = DeckSession(
            store,
            deck_format=settings.default_format,
            strict_matching=settings.strict_restriction_matching,
            ydk_comment=settings.ydk_comment,
        )
        yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("ygodeck"),
    lifespan=lifespan,
)

app.include_router(decks_router)
app.include_router(health_router)
app.include_router(reference_router)
app.include_router(search_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RefusalError)
async def refusal_handler(_request: Request, exc: RefusalError) -> JSONResponse:
    response = create_refusal(exc.kind, exc.message, exc.detail)
    return JSONResponse(status_code=409, content=response.model_dump(mode="json"))


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    response = create_known_failure(exc)
    return JSONResponse(status_code=exc.status_code, content=response.model_dump(mode="json"))


@app.exception_handler(Exception)
async def unknown_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error")
    response = create_unknown_failure(exc)
    return JSONResponse(status_code=500, content=response.model_dump(mode="json"))
