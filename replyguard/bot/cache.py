"""
In-memory TTL cache for getChat results.

Per process and best-effort: entries vanish on restart and are never
shared between instances.
"""

import time
from typing import Callable, Dict, Optional, Tuple

from pydantic import ValidationError

from replyguard.bot.models import ChatInfo
from replyguard.bot.tg import ChatId, TelegramClient
from replyguard.logger import root_logger
from replyguard.settings import CACHE_TTL

log = root_logger.debug


class ChatInfoCache:
    """Memoizes chat metadata (notably linked_chat_id) for a fixed TTL."""

    def __init__(
        self,
        client: TelegramClient,
        ttl: float = CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[ChatId, Tuple[ChatInfo, float]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    async def get_chat_info(self, chat_id: ChatId) -> Optional[ChatInfo]:
        """
        Get chat metadata, from cache when fresh.

        Failures are not cached, the next lookup fetches again.

        Args:
            chat_id: Telegram chat ID

        Returns:
            ChatInfo or None if it could not be fetched
        """
        now = self._clock()

        cached = self._entries.get(chat_id)
        if cached is not None:
            info, fetched_at = cached
            if now - fetched_at < self.ttl:
                log(f"📋 Using cached chat info for {chat_id}")
                return info
            del self._entries[chat_id]

        raw = await self.client.get_chat(chat_id)
        if raw is None:
            root_logger.warning(f"⚠️ Could not fetch chat info for {chat_id}")
            return None

        try:
            info = ChatInfo.model_validate(raw)
        except ValidationError as e:
            root_logger.error(f"❌ Invalid chat info for {chat_id}: {e}")
            return None

        self._entries[chat_id] = (info, now)
        log(f"💾 Cached chat info for {chat_id}")
        return info
