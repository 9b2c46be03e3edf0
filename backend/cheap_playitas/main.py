import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cheap_playitas.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(settings.log_dir)
_LOG_DIR.mkdir(parents=True, exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "cheap_playitas.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from cheap_playitas.routers import prices
from cheap_playitas.services.apollo_client import ApolloClient, build_http_client
from cheap_playitas.services.cache_service import PriceCache
from cheap_playitas.services.price_aggregator import PriceAggregator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: one shared outbound pool and one price cache for the process
    http = build_http_client()
    app.state.price_cache = PriceCache(ttl=settings.prices_cache_ttl_seconds)
    app.state.price_aggregator = PriceAggregator(ApolloClient(http))
    logger.info(
        f"Apollo client ready: {settings.apollo_base_url} "
        f"(max {settings.upstream_max_connections} connections, "
        f"strategy={settings.long_stay_strategy}, pricing={settings.long_stay_pricing})"
    )

    yield

    # Shutdown
    await http.aclose()
    logger.info("Apollo client closed")


app = FastAPI(
    title="Cheap Playitas",
    description="Cheapest Playitas flight+hotel packages across airports, durations and months",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(prices.router, prefix="/api", tags=["prices"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "cheap-playitas"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("cheap_playitas.main:app", host="0.0.0.0", port=8000)
