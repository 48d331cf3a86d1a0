# main.py
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from config.logging_config import configure_logging
from database import init_db
from middleware.rate_limit import limiter
from middleware.request_logging import RequestLoggingMiddleware
from routers.inventory_routes import router as inventory_router
from routers.item_routes import router as item_router
from routers.stats_routes import router as stats_router
from routers.trade_routes import router as trade_router

configure_logging()

app = FastAPI(title="Skin Ledger")

origins = [
    o.strip()
    for o in os.getenv("CORS_ORIGINS", "http://localhost:3000,http://localhost:5173").split(",")
    if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Include routers
app.include_router(item_router, prefix="/api")
app.include_router(trade_router, prefix="/api")
app.include_router(inventory_router, prefix="/api")
app.include_router(stats_router, prefix="/api")


@app.get("/health")
def health():
    return {"status": "ok"}


# db startup; production schema changes go through alembic
init_db()
