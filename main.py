"""
Victoria Address Validator
Run with: uvicorn main:app --reload --port 3000

Supports two modes:
- GEOCODER MODE (default): Nominatim lookup first, regex fallback second
- OFFLINE MODE: GEOCODER_ENABLED=false - regex fallback only
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
load_dotenv()  # Must be before importing config

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from vicaddr.config import Config
from vicaddr.address_pipeline import AddressValidationOrchestrator, BatchProcessor
from vicaddr.address_router import (
    configure_router,
    public_router as public_address_router,
    reset_router,
    router as address_router,
)
from vicaddr.geocode_client import DisabledGeocodeClient, GeocodeClient, NominatimClient
from vicaddr.utils.resilience import ValidationAuditLog

cfg = Config()  # Fresh instance after dotenv loaded

logging.basicConfig(
    level=cfg.log_level,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def build_geocoder(config: Config, http_client: httpx.AsyncClient | None = None) -> GeocodeClient:
    """Create the geocoder configured for this process."""
    if not config.geocoder_enabled:
        logger.info("Geocoder disabled - regex fallback only")
        return DisabledGeocodeClient()
    logger.info(f"Geocoder: {config.geocoder_url}")
    return NominatimClient(**config.get_geocoder_config(), http_client=http_client)


@asynccontextmanager
async def lifespan(app: FastAPI):
    http_client = httpx.AsyncClient(timeout=cfg.geocoder_timeout)
    audit_log = ValidationAuditLog(max_entries=cfg.audit_log_size)
    orchestrator = AddressValidationOrchestrator(
        geocoder=build_geocoder(cfg, http_client),
        max_suggestions=cfg.max_suggestions,
        audit_log=audit_log,
    )
    configure_router(
        orchestrator,
        batch_processor=BatchProcessor(orchestrator, delay_seconds=cfg.batch_delay_seconds),
        audit_log=audit_log,
    )
    logger.info(f"Address validation ready (target state {cfg.target_state_code})")

    yield

    reset_router()
    await http_client.aclose()


app = FastAPI(
    title="Victoria Address Validator",
    description="Validates free-text Victorian addresses via Nominatim with a regex fallback",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cfg.cors_origins),
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

app.include_router(public_address_router)
app.include_router(address_router)


@app.get("/api/health")
async def health():
    return {"status": "ok", "geocoder_enabled": cfg.geocoder_enabled}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=3000)
