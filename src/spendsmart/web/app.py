"""
SpendSmart API - FastAPI application.

Hosts the onboarding router. Uses Supabase Auth bearer tokens.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from spendsmart import __version__
from spendsmart.config import settings
from onboarding.api import get_registry, router as onboarding_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(f"SpendSmart API {__version__} starting ({settings.spendsmart_env})")
    if not settings.supabase_configured:
        logger.warning("Supabase is not configured; onboarding saves will fail")
    yield
    # Stop any personalization phase still running
    await get_registry().end_all()
    logger.info("SpendSmart API stopped")


app = FastAPI(title="SpendSmart", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.is_development else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(onboarding_router)


@app.get("/health")
async def health():
    return {"status": "healthy", "version": __version__, "service": "spendsmart"}
