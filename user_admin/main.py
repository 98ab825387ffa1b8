"""FastAPI application wiring for the user administration service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from .api import handlers
from .api.routes import router as v1_router
from .config import get_settings
from .domain.service import UserAdminService
from .gateway import SupabaseGateway

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the gateway and service once for the app lifecycle."""
    gateway = SupabaseGateway(settings)
    if not (settings.supabase_url and settings.supabase_anon_key and settings.supabase_service_role_key):
        # requests will answer 500 until the environment is fixed
        logger.error("backend credentials incomplete; privileged endpoints will fail")
    app.state.user_admin_service = UserAdminService(gateway)
    yield


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
handlers.install(app)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics", tags=["health"])
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
