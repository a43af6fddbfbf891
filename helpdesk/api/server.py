"""
Helpdesk API — FastAPI Server
Read API over conversations, channels, engage messages and companies.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from helpdesk import __version__
from helpdesk.api.routes import register_routes
from helpdesk.config.settings import settings
from helpdesk.db.engine import create_tables, dispose_engine, get_engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and teardown database resources."""
    print("[HELPDESK] Initializing API...")
    try:
        await create_tables(get_engine())
        print("[HELPDESK]   Database: tables initialized")
    except Exception as e:
        print(f"[HELPDESK]   Database: SKIPPED ({e})")
    print(f"[HELPDESK]   Environment: {settings.environment}")
    print(f"[HELPDESK]   Aggregation concurrency: {settings.aggregation_concurrency}")
    print("[HELPDESK] API ready.")
    yield
    print("[HELPDESK] Shutting down...")
    await dispose_engine()


_openapi_tags = [
    {"name": "System", "description": "Health checks"},
    {"name": "Conversations", "description": "Conversation lists, details, messages and counts"},
    {"name": "Channels", "description": "Channels and their members"},
    {"name": "Engage Messages", "description": "Engage campaigns and their counts"},
    {"name": "Companies", "description": "Company records (read-only)"},
]

app = FastAPI(
    title="Helpdesk API",
    description="Conversation inbox, channels, engage messages and companies.",
    version=__version__,
    lifespan=lifespan,
    openapi_tags=_openapi_tags,
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (configurable allowed origins) ─────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["System"])
async def health():
    return {"status": "ok", "version": __version__, "environment": settings.environment}


register_routes(app)
