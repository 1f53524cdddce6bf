import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.templating import Jinja2Templates
from starlette.middleware.base import BaseHTTPMiddleware

from waitlist.core.config import Settings, get_settings
from waitlist.core.logging_config import setup_logging
from waitlist.routers import admin as admin_router
from waitlist.routers import pages as pages_router
from waitlist.routers import signup as signup_router
from waitlist.services.signup_service import WaitlistService, build_service

logger = logging.getLogger(__name__)

BASE = os.path.dirname(__file__)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject baseline security headers (CSP, anti clickjacking, referrer policy)."""

    def __init__(self, app, *, enforce_hsts: bool) -> None:
        super().__init__(app)
        self._enforce_hsts = enforce_hsts

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'self'; "
            "img-src 'self' data:; "
            "style-src 'self' 'unsafe-inline' https://unpkg.com; "
            "script-src 'self' 'unsafe-inline'; "
            "connect-src 'self'",
        )
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer-when-downgrade")
        if self._enforce_hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        return response


def create_app(settings: Settings | None = None, service: WaitlistService | None = None) -> FastAPI:
    """Factory compatible with uvicorn (--factory) and the tests."""
    settings = settings or get_settings()
    setup_logging(settings)
    service = service or build_service(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        service.notifier.close()

    app = FastAPI(title="Waitlist API", lifespan=lifespan)
    app.state.settings = settings
    app.state.waitlist_service = service
    app.state.templates = Jinja2Templates(directory=os.path.join(BASE, "templates"))

    allowed_cors = {settings.public_base_url}
    if settings.app_env != "prod":
        allowed_cors.update(
            {
                "http://localhost:3000",
                "http://127.0.0.1:3000",
                "http://localhost:8000",
                "http://127.0.0.1:8000",
            }
        )
    allowed_cors = {origin for origin in allowed_cors if origin}
    if allowed_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=sorted(allowed_cors),
            allow_credentials=False,
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")

    app.include_router(signup_router.router)
    app.include_router(admin_router.router)
    app.include_router(pages_router.router)

    logger.info("Waitlist API ready (env=%s, storage=%s)", settings.app_env, settings.storage_backend)
    return app
