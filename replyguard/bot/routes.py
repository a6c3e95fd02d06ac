"""
Webhook intake and registration routes.
"""

import json
import secrets
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError

from replyguard.bot.main import BotManager
from replyguard.bot.models import Update
from replyguard.logger import root_logger

log = root_logger.debug

router = APIRouter(tags=["bot"])

SECRET_HEADER = "X-Telegram-Bot-Api-Secret-Token"


def get_bot_manager(request: Request) -> BotManager:
    """Bot manager of the current app instance."""
    manager: Optional[BotManager] = getattr(request.app.state, "bot_manager", None)
    if manager is None:
        raise HTTPException(status_code=500, detail="Configuration Error")
    return manager


def build_webhook_url(request: Request) -> str:
    """Public /webhook URL of this service, as seen by the caller of /setup."""
    configured = getattr(request.app.state, "webhook_url", None)
    if configured:
        return configured

    scheme = request.headers.get("x-forwarded-proto", request.url.scheme).split(",")[0].strip()
    host = request.headers.get("x-forwarded-host") or request.headers.get("host") or request.url.netloc
    return f"{scheme}://{host}/webhook"


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.post("/webhook")
async def handle_webhook_update(
    request: Request,
    background_tasks: BackgroundTasks,
    manager: BotManager = Depends(get_bot_manager),
):
    """
    Handle incoming webhook updates from Telegram.

    Accepted updates are always answered with 200, processing failures
    included, so Telegram does not redeliver them.
    """
    if manager.webhook_secret:
        received = request.headers.get(SECRET_HEADER, "")
        if not secrets.compare_digest(received, manager.webhook_secret):
            root_logger.warning("🚫 Webhook request with invalid secret token")
            return PlainTextResponse("Unauthorized", status_code=401)

    content_type = request.headers.get("content-type", "")
    if "application/json" not in content_type:
        root_logger.warning("🚫 Invalid Content-Type for webhook request")
        return PlainTextResponse("Invalid Content-Type", status_code=400)

    try:
        data = json.loads(await request.body())
    except ValueError as e:
        root_logger.error(f"❌ Failed to parse webhook JSON: {e}")
        return PlainTextResponse("Invalid JSON", status_code=400)

    try:
        update = Update.model_validate(data)
    except ValidationError:
        root_logger.warning("🚫 Invalid update structure received")
        return PlainTextResponse("Invalid update format", status_code=400)

    log(f"📥 Webhook update {update.update_id} accepted")

    try:
        await manager.processor.process_update(update, background_tasks)
    except Exception as e:
        root_logger.error(f"❌ Error processing update {update.update_id}: {e}")

    return PlainTextResponse("OK")


@router.get("/setup")
async def setup_webhook(request: Request, manager: BotManager = Depends(get_bot_manager)):
    """Register this service's /webhook URL with Telegram."""
    webhook_url = build_webhook_url(request)

    if await manager.register_webhook(webhook_url):
        root_logger.info(f"✅ Webhook set successfully to {webhook_url}")
        return JSONResponse(
            {"success": True, "message": f"Webhook set successfully to {webhook_url}", "timestamp": _timestamp()}
        )

    root_logger.error(f"❌ Failed to set webhook to {webhook_url}")
    return JSONResponse(
        {"success": False, "error": "Failed to set webhook", "timestamp": _timestamp()},
        status_code=500,
    )
