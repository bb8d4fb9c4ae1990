import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# -------------------------------------------------------
# ⚙️ Core Imports
# -------------------------------------------------------
from .core.config import settings
from .core.db import Base, engine, db_healthcheck
from .core.logging import setup_logging
from .api.exception_handlers import register_exception_handlers
from . import models  # noqa: F401  (registers tables on Base.metadata)

# -------------------------------------------------------
# 🧩 Routers
# -------------------------------------------------------
from .routers import auth, dispensary

VERSION = "1.0.0"

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# -------------------------------------------------------
# 🚀 FastAPI Initialization
# -------------------------------------------------------
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=VERSION,
    description="PharmaDesk – pharmacy dispensing and billing",
)

# -------------------------------------------------------
# 🌐 CORS Middleware
# -------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# -------------------------------------------------------
# 🏁 Startup Events
# -------------------------------------------------------
@app.on_event("startup")
def on_startup():
    """Create tables if missing."""
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database models created.")
    except Exception as e:
        logger.warning("Database init skipped: %s", e)
    logger.info("%s %s started (%s)", settings.PROJECT_NAME, VERSION, settings.ENVIRONMENT)


# -------------------------------------------------------
# ❤️ Health Checks
# -------------------------------------------------------
@app.get("/health", tags=["Health"])
def health():
    return {
        "status": "ok",
        "service": settings.PROJECT_NAME,
        "version": VERSION,
    }


@app.get("/health/db", tags=["Health"])
def health_db():
    ok, error = db_healthcheck()
    return {"database": "ok" if ok else "error", "error": error}


# -------------------------------------------------------
# 🔗 Router Registration
# -------------------------------------------------------
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(dispensary.router, prefix=settings.API_PREFIX)
