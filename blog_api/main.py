"""
Blog API — entry point.

Startup sequence:
  1. Configure OTel tracing (OTLP export if an endpoint is configured)
  2. Create tables if not present
  3. Start the async HTTP client for the image provider
  4. Expose Prometheus /metrics endpoint
"""
import logging

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import make_asgi_app

from blog_api.config import settings
from blog_api.database import init_db
from blog_api.errors import register_error_handlers
from blog_api.telemetry import setup_tracing, instrument_app
from blog_api.clients.image_client import image_client
from blog_api.routers import auth, engagement, posts, uploads, users

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

# Set up tracing before the app is created so all imports are instrumented
setup_tracing()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage startup and shutdown of external connections."""
    logger.info("Starting Blog API (env=%s)", settings.environment)

    await init_db()
    await image_client.start()
    if not image_client.configured:
        logger.warning("Image storage credentials missing — /upload-image will fail")

    logger.info("Blog API ready.")
    yield

    logger.info("Shutting down...")
    await image_client.stop()


app = FastAPI(
    title="Blog API",
    description="Blogging backend: accounts, posts, comments, likes and image upload.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

register_error_handlers(app)

# ── Routers ────────────────────────────────────────────────────────────────
app.include_router(auth.router, prefix=settings.api_prefix, tags=["Auth"])
app.include_router(uploads.router, prefix=settings.api_prefix, tags=["Uploads"])
app.include_router(posts.router, prefix=settings.api_prefix, tags=["Posts"])
app.include_router(engagement.router, prefix=settings.api_prefix, tags=["Comments & Likes"])
app.include_router(users.router, prefix=settings.api_prefix, tags=["Users"])

# ── Prometheus metrics endpoint ────────────────────────────────────────────
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)

# ── OTel FastAPI instrumentation ──────────────────────────────────────────
instrument_app(app)


@app.get("/", tags=["Health"])
async def root():
    return {"message": "Hello World"}


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "ok", "service": settings.service_name}


@app.get(f"{settings.api_prefix}/test-env", tags=["Health"])
async def config_report():
    """Report which deployment settings are present, without revealing values."""
    def presence(value) -> str:
        return "Available" if value else "Missing"

    return {
        "cloudinaryCloudName": presence(settings.cloudinary_cloud_name),
        "cloudinaryApiKey": presence(settings.cloudinary_api_key),
        "cloudinaryApiSecret": presence(settings.cloudinary_api_secret),
        "databaseUrl": presence(settings.database_url or settings.db_host),
    }
