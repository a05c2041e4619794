"""Marketplace FastAPI application.

Processes commands synchronously over HTTP. Every request runs inside the
marketplace domain context and carries a request id in its log context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# PROTEAN_ENV controls which config overlay is applied:
#   - "test"       → event_processing = "sync"  (handlers fire in UoW)
#   - "production" → event_processing = "async" (handlers fire via Engine)
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from marketplace.domain import marketplace
from marketplace.utils.logging import add_context, clear_context, configure_logging

configure_logging()
marketplace.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Marketplace API",
    description="Delivery marketplace — orders, couriers, wallet ledger and notifications",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the marketplace domain context and bind a request id for logging."""
    add_context(request_id=request.headers.get("X-Request-ID") or uuid.uuid4().hex)
    try:
        with marketplace.domain_context():
            response = await call_next(request)
    finally:
        clear_context()
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from marketplace.api import (  # noqa: E402
    contact_router,
    courier_router,
    notification_router,
    order_router,
    register_exception_handlers,
    stats_router,
    transaction_router,
    upload_router,
    user_router,
)

app.include_router(user_router)
app.include_router(courier_router)
app.include_router(order_router)
app.include_router(transaction_router)
app.include_router(notification_router)
app.include_router(upload_router)
app.include_router(stats_router)
app.include_router(contact_router)

register_exception_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": marketplace.name}})
