from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.app.core.log_config import configure_logging
from backend.app.core.settings import settings
from backend.app.services.aggregator import build_aggregator
from .routes import market

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # raises MarketCheckConfigError when MARKETCHECK_API_KEY is missing
    app.state.aggregator = build_aggregator(settings)
    try:
        yield
    finally:
        await app.state.aggregator.aclose()


app = FastAPI(title="Tribe Market API", version="0.1.0", lifespan=lifespan)

app.include_router(market.router, prefix="/api/market", tags=["market"])


@app.get("/")
async def health():
    return "Tribe Market API is running..."
