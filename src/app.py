"""Storefront FastAPI application — checkout, order administration and stock reads.

Every ``/api`` request is wrapped in the ordering domain context so handlers
can reach repositories through ``current_domain``.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from catalogue.api import product_router
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from ordering.api.errors import install_error_handlers
from ordering.api.routes import admin_order_router, order_router
from ordering.domain import ordering
from shared.logging import configure_logging

configure_logging()

# Domains are initialized at module level so uvicorn workers share them.
ordering.init()

_DOMAIN_PREFIX = "/api"

app = FastAPI(
    title="Storefront API",
    description="Cash-on-delivery checkout with stock-consistent order intake",
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
    """Push the ordering domain context for API requests."""
    if request.url.path.startswith(_DOMAIN_PREFIX):
        with ordering.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs
    return await call_next(request)


install_error_handlers(app)

app.include_router(order_router)
app.include_router(admin_order_router)
app.include_router(product_router)


@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domains": {"ordering": {"name": ordering.name}}})
