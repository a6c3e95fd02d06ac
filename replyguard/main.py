"""FastAPI application for the cross-channel reply guard."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from replyguard.bot.main import BotManager, create_bot_manager
from replyguard.bot.routes import router as routerBot
from replyguard.bot.tg import TelegramClient
from replyguard.logger import root_logger
from replyguard.ratelimit import RateLimiter, RateLimitMiddleware
from replyguard.settings import APP_VERSION, BOT_TOKEN, WEBHOOK_SECRET, WEBHOOK_URL

log = root_logger.debug


class ConfigurationCheckMiddleware(BaseHTTPMiddleware):
    """Fails every request while the bot token is missing."""

    async def dispatch(self, request: Request, call_next):
        if getattr(request.app.state, "bot_manager", None) is None:
            root_logger.error("❌ BOT_TOKEN environment variable is required")
            return PlainTextResponse("Configuration Error", status_code=500)
        return await call_next(request)


def create_app(
    bot_token: Optional[str] = BOT_TOKEN,
    *,
    client: Optional[TelegramClient] = None,
    bot_manager: Optional[BotManager] = None,
    rate_limiter: Optional[RateLimiter] = None,
    webhook_url: Optional[str] = WEBHOOK_URL,
    webhook_secret: Optional[str] = WEBHOOK_SECRET,
) -> FastAPI:
    """
    Build an app instance with its own cache and rate-limit state.

    Args:
        bot_token: Telegram bot token; without it every request fails with 500
        client: Prebuilt Bot API client
        bot_manager: Prebuilt bot manager, overrides token and client
        rate_limiter: Rate limiter, a default one is created if omitted
        webhook_url: Fixed callback URL for /setup instead of deriving it
        webhook_secret: Secret token Telegram must echo on every webhook call

    Returns:
        FastAPI application
    """
    if bot_manager is None and bot_token:
        bot_manager = create_bot_manager(bot_token, client, webhook_secret=webhook_secret)
    if bot_manager is None:
        root_logger.error("❌ BOT_TOKEN environment variable is required")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log("🚀 Starting reply guard...")
        yield
        log("🛑 Shutting down reply guard...")
        if app.state.bot_manager is not None:
            await app.state.bot_manager.shutdown()

    app = FastAPI(
        title="Cross-Channel Reply Guard",
        version=APP_VERSION,
        description="Deletes replies to external channels in Telegram groups",
        lifespan=lifespan,
    )
    app.state.bot_manager = bot_manager
    app.state.rate_limiter = rate_limiter if rate_limiter is not None else RateLimiter()
    app.state.webhook_url = webhook_url

    # Last added runs first: configuration check, then rate limiting
    app.add_middleware(RateLimitMiddleware, limiter=app.state.rate_limiter)
    app.add_middleware(ConfigurationCheckMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def plain_http_exception(request: Request, exc: StarletteHTTPException):
        # Routes match on method and path together, a wrong method is an unknown route
        if exc.status_code in (404, 405):
            root_logger.warning(f"🔍 Unknown route accessed: {request.method} {request.url.path}")
            return PlainTextResponse("Not Found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)

    @app.get("/health")
    async def health_check():
        """Health probe, no authentication"""
        return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat(), "version": APP_VERSION}

    app.include_router(routerBot)

    return app


app = create_app()
