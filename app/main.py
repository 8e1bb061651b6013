"""
FastAPI Application Entry Point

WhatsApp Restaurant Assistant - Hybrid Architecture
Supports both Mock collaborators (development) and PostgreSQL (production).

Endpoints:
    - POST /webhook/whatsapp: Twilio WhatsApp webhook (TwiML reply)
    - POST /webhook/simulation: Local testing endpoint (JSON)
    - GET /health: System health check

Author: Khalil Bannouri
Version: 1.0.0
"""

import asyncio
import sys
import logging
from datetime import datetime
from typing import Any, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, Form, Header, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.middleware.cors import CORSMiddleware
from twilio.request_validator import RequestValidator
from twilio.twiml.messaging_response import MessagingResponse

# Windows-specific event loop policy
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

# Internal imports
from app.core.config import get_settings, setup_logging
from app.schemas import HealthResponse, SimulatedMessage, SimulatedReply
from app.services.catalog import get_catalog_service
from app.services.persistence import get_persistence_service
from app.services.routing import get_routing_service
from app.services.whatsapp import (
    get_session_store,
    get_session_sweeper,
    get_whatsapp_handler,
)

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"🚀 Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Debug: {settings.debug}")
    logger.info("=" * 60)

    if settings.use_real_services:
        from app.database import init_db

        await init_db()
        logger.info("✅ Database initialized")

        missing = settings.validate_production_config()
        if missing:
            logger.warning(f"⚠️ Missing production config: {missing}")

    # Log service configuration
    store = get_session_store()
    logger.info(f"✅ Session Store: {store.provider_name}")
    logger.info(f"✅ Catalog Service: {get_catalog_service().provider_name}")
    logger.info(f"✅ Persistence Service: {get_persistence_service().provider_name}")
    logger.info(f"✅ Routing Service: {get_routing_service().provider_name}")

    sweeper = get_session_sweeper()
    sweeper.start()

    logger.info("=" * 60)
    logger.info("✅ Application ready!")
    logger.info("=" * 60)

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await sweeper.stop()
    await store.close()
    if settings.use_real_services:
        from app.database import close_db

        await close_db()
    logger.info("✅ Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description=(
        "Session-based WhatsApp assistant for restaurants: ordering, "
        "table booking, feedback and complaints."
    ),
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def twiml_reply(text: str) -> Response:
    """Wrap a reply text in a single TwiML <Message>."""
    response = MessagingResponse()
    response.message(text)
    return Response(content=str(response), media_type="application/xml")


async def verify_twilio_signature(request: Request, signature: Optional[str]) -> bool:
    validator = RequestValidator(settings.twilio_auth_token or "")
    form = await request.form()
    return validator.validate(str(request.url), dict(form), signature or "")


# =============================================================================
# ROOT & HEALTH ENDPOINTS
# =============================================================================

@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """API root with navigation links."""
    return {
        "message": f"🍕 Welcome to {settings.app_name}",
        "version": settings.app_version,
        "environment": settings.env_mode.value,
        "documentation": "/docs",
        "webhook": "/webhook/whatsapp",
        "health": "/health",
    }


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check() -> HealthResponse:
    """Verify all system components are operational."""
    store = get_session_store()

    store_status = "healthy" if await store.health_check() else "unhealthy"
    catalog_status = "healthy" if await get_catalog_service().health_check() else "unhealthy"
    persistence_status = "healthy" if await get_persistence_service().health_check() else "unhealthy"

    active_sessions = 0
    if store_status == "healthy":
        active_sessions = await store.count()

    overall = "operational" if all(
        s == "healthy" for s in [store_status, catalog_status, persistence_status]
    ) else "degraded"

    return HealthResponse(
        status=overall,
        session_store=store_status,
        catalog=catalog_status,
        persistence=persistence_status,
        active_sessions=active_sessions,
        timestamp=datetime.now(),
    )


# =============================================================================
# WHATSAPP WEBHOOK ENDPOINTS
# =============================================================================

@app.post(
    "/webhook/whatsapp",
    tags=["WhatsApp Webhook"],
    summary="Twilio WhatsApp Webhook Endpoint",
)
async def whatsapp_webhook(
    request: Request,
    from_phone: str = Form(..., alias="From"),
    to_route: str = Form(..., alias="To"),
    body: str = Form("", alias="Body"),
    x_twilio_signature: Optional[str] = Header(None, alias="X-Twilio-Signature"),
) -> Response:
    """
    Handle incoming WhatsApp messages relayed by Twilio.

    Configure this URL as the "When a message comes in" webhook of your
    Twilio WhatsApp sender:
        https://your-domain.com/webhook/whatsapp
    """
    if settings.validate_twilio_signature:
        if not await verify_twilio_signature(request, x_twilio_signature):
            logger.warning(f"Rejected webhook call with invalid signature from {from_phone}")
            raise HTTPException(status_code=403, detail="Invalid Twilio signature")

    handler = get_whatsapp_handler()
    reply = await handler.handle_message(from_phone, to_route, body)
    return twiml_reply(reply)


@app.post(
    "/webhook/simulation",
    response_model=SimulatedReply,
    tags=["Simulation"],
    summary="Simulation Webhook (Development)",
)
async def simulation_webhook(message: SimulatedMessage) -> SimulatedReply:
    """
    Simulation endpoint for local testing.

    Runs the same conversation engine as the Twilio webhook but speaks
    JSON and reports where the conversation ended up. Use
    scripts/simulate.py to drive many conversations at once.
    """
    if not settings.is_development:
        raise HTTPException(
            status_code=403,
            detail="Simulation endpoint only available in development mode"
        )

    handler = get_whatsapp_handler()
    result = await handler.process(message.from_phone, message.to_route, message.body)

    session = result.session
    return SimulatedReply(
        reply=result.reply,
        flow_type=session.flow_type.value if session else None,
        step=int(session.step) if session else None,
    )


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    content: dict[str, Any] = {
        "success": False,
        "error": "Internal Server Error",
        "detail": str(exc) if settings.debug else "An unexpected error occurred",
    }
    return JSONResponse(status_code=500, content=content)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
    )
