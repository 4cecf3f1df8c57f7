"""FundScope API - Main Application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware

from fundscope import __version__
from fundscope.api.funds import router as funds_router
from fundscope.core.config import get_settings
from fundscope.core.http_client import close_http_client, get_fund_api_client
from fundscope.models.fund import HealthStatus
from fundscope.utils.fund_api_client import FundAPIClient

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_http_client()


app = FastAPI(
    title="FundScope API",
    description="Mutual fund aggregation and category normalization over the fund backend",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(funds_router)


@app.get("/")
def read_root():
    """Root endpoint with API info."""
    return {
        "message": "Welcome to FundScope API",
        "version": __version__,
        "docs": "/docs",
    }


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.get("/health/backend", response_model=HealthStatus)
async def backend_health(
    client: FundAPIClient = Depends(get_fund_api_client),
) -> HealthStatus:
    """Probe the upstream fund backend."""
    return await client.check_health()
