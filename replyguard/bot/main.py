"""
Bot service wiring.

Builds the client, cache, moderator and processor for one app instance.
"""

from typing import Optional

from replyguard.bot.cache import ChatInfoCache
from replyguard.bot.handler import MessageProcessor
from replyguard.bot.moderation import Moderator
from replyguard.bot.tg import TelegramClient
from replyguard.logger import root_logger
from replyguard.settings import (
    ALLOWED_UPDATES,
    CACHE_TTL,
    WARNING_AUTO_DELETE_DELAY,
    WARNING_MESSAGE_TEXT,
    WEBHOOK_MAX_CONNECTIONS,
)

log = root_logger.debug


class BotManager:
    """
    Owns per-instance bot state.

    Cache contents live only as long as this object.
    """

    def __init__(
        self,
        client: TelegramClient,
        chat_cache: ChatInfoCache,
        moderator: Moderator,
        webhook_secret: Optional[str] = None,
    ) -> None:
        self.client = client
        self.chat_cache = chat_cache
        self.moderator = moderator
        self.processor = MessageProcessor(client, chat_cache, moderator)
        self.webhook_secret = webhook_secret

    async def register_webhook(self, url: str) -> bool:
        """Point Telegram at url, dropping updates queued in the meantime."""
        root_logger.info(f"🔧 Setting up webhook to: {url}")
        return await self.client.set_webhook(
            url,
            allowed_updates=ALLOWED_UPDATES,
            drop_pending_updates=True,
            max_connections=WEBHOOK_MAX_CONNECTIONS,
            secret_token=self.webhook_secret,
        )

    async def shutdown(self) -> None:
        log("Shutting down bot manager")
        await self.client.close()
        self.chat_cache.clear()
        log("Bot manager shutdown complete")


def create_bot_manager(
    token: str,
    client: Optional[TelegramClient] = None,
    *,
    cache_ttl: float = CACHE_TTL,
    warning_text: str = WARNING_MESSAGE_TEXT,
    warning_delete_delay: float = WARNING_AUTO_DELETE_DELAY,
    webhook_secret: Optional[str] = None,
) -> BotManager:
    """
    Create the bot manager.

    Args:
        token: Telegram bot token
        client: Prebuilt API client (tests pass a fake here)
        cache_ttl: Chat info cache TTL, seconds
        warning_text: Warning posted after deleting a message
        warning_delete_delay: Seconds before the warning is removed
        webhook_secret: Secret token expected in webhook requests

    Returns:
        BotManager instance
    """
    if not token:
        raise ValueError("BOT_TOKEN environment variable is required")

    client = client or TelegramClient(token)
    return BotManager(
        client=client,
        chat_cache=ChatInfoCache(client, ttl=cache_ttl),
        moderator=Moderator(client, warning_text=warning_text, warning_delete_delay=warning_delete_delay),
        webhook_secret=webhook_secret,
    )
