"""
PictoCat API

FastAPI application: lifespan, middleware, error rendering and routers.
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from pictocat import __version__
from pictocat.config import settings
from pictocat.database import Database
from pictocat.errors import PictoCatError
from pictocat.routers import (
    achievements,
    admin,
    catalog,
    community,
    daily,
    friends,
    games,
    shop,
    suggestions,
    users,
)
from pictocat.services.auth_service import check_firebase_health, init_firebase

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("PictoCat backend starting...")

    init_firebase()
    await Database.connect()

    yield

    await Database.disconnect()
    logger.info("PictoCat backend shutting down...")


app = FastAPI(
    title="PictoCat",
    description="Progression, economy and social backend for the PictoCat AAC board",
    version=__version__,
    lifespan=lifespan,
)

logger.info(f"Configuring CORS for origins: {settings.cors_origins_list}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
    max_age=3600,
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(RequestIDMiddleware)


# =============================================================================
# Error rendering
# =============================================================================

@app.exception_handler(PictoCatError)
async def pictocat_error_handler(request: Request, exc: PictoCatError):
    """Expected business-rule rejections: short reason plus error class."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.message, "error": exc.code},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Unhandled errors. Details stay in the log."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "error": "InternalError"},
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(users.router, prefix="/api/user", tags=["User"])
app.include_router(catalog.router, prefix="/api/catalog", tags=["Catalog"])
app.include_router(shop.router, prefix="/api/shop", tags=["Shop"])
app.include_router(daily.router, prefix="/api/daily-pass", tags=["Daily Pass"])
app.include_router(achievements.router, prefix="/api/achievements", tags=["Achievements"])
app.include_router(friends.router, prefix="/api/friends", tags=["Friends"])
app.include_router(community.router, prefix="/api/community", tags=["Community"])
app.include_router(games.router, prefix="/api/games", tags=["Games"])
app.include_router(suggestions.router, prefix="/api/suggestions", tags=["Suggestions"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
async def root():
    return {"status": "ok", "service": "pictocat"}


@app.get("/health")
async def health():
    db_healthy = await Database.check_health()
    firebase_healthy = check_firebase_health()

    return {
        "status": "healthy" if db_healthy and firebase_healthy else "degraded",
        "version": __version__,
        "services": {
            "database": "connected" if db_healthy else "disconnected",
            "firebase": "initialized" if firebase_healthy else "not_initialized",
        },
    }
