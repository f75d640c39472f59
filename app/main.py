import asyncio
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded

from app.config.settings import settings
from app.modules.auth import routes as auth_routes
from app.modules.profiles import routes as profiles_routes
from app.modules.polls import routes as polls_routes
from app.modules.comments import routes as comments_routes
from app.modules.rewards import routes as rewards_routes
from app.modules.store import routes as store_routes
from app.modules.trivia import routes as trivia_routes
from app.modules.badges import routes as badges_routes
from app.modules.ambassadors import routes as ambassadors_routes
from app.modules.referrals import routes as referrals_routes
from app.modules.sponsors import routes as sponsors_routes
from app.modules.promoted_polls import routes as promoted_polls_routes
from app.modules.moderation import routes as moderation_routes
from app.modules.app_settings import routes as app_settings_routes
from app.modules.payments import routes as payments_routes
from app.modules.payouts import routes as payouts_routes
from app.modules.analytics import routes as analytics_routes
from app.modules.poll_generation import routes as poll_generation_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
    return JSONResponse(status_code=500, content={"detail": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix="/api/v1")
app.include_router(profiles_routes.router, prefix="/api/v1")
app.include_router(polls_routes.router, prefix="/api/v1")
app.include_router(comments_routes.router, prefix="/api/v1")
app.include_router(rewards_routes.router, prefix="/api/v1")
app.include_router(store_routes.router, prefix="/api/v1")
app.include_router(trivia_routes.router, prefix="/api/v1")
app.include_router(badges_routes.router, prefix="/api/v1")
app.include_router(ambassadors_routes.router, prefix="/api/v1")
app.include_router(referrals_routes.router, prefix="/api/v1")
app.include_router(sponsors_routes.router, prefix="/api/v1")
app.include_router(promoted_polls_routes.router, prefix="/api/v1")
app.include_router(moderation_routes.router, prefix="/api/v1")
app.include_router(app_settings_routes.router, prefix="/api/v1")
app.include_router(payments_routes.router, prefix="/api/v1")
app.include_router(payouts_routes.router, prefix="/api/v1")
app.include_router(analytics_routes.router, prefix="/api/v1")
app.include_router(poll_generation_routes.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup")

    if settings.scheduler_enabled:
        from app.modules.promoted_polls.scheduler import status_scheduler_loop
        app.state.status_scheduler = asyncio.create_task(status_scheduler_loop())
        logger.info(
            f"Status scheduler started - will check promotions every "
            f"{settings.scheduler_interval_seconds} seconds"
        )


@app.on_event("shutdown")
async def shutdown_event():
    task = getattr(app.state, "status_scheduler", None)
    if task:
        task.cancel()
    logger.info("Application shutdown")


@app.get("/")
async def root():
    return {"message": f"Welcome to {settings.app_name}", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready():
    """Readiness check"""
    return {"status": "ready"}
