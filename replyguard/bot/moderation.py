"""
Removal of blocked messages and the short-lived warning that follows.
"""

import asyncio
from typing import Any, Awaitable, Callable, Protocol

from replyguard.bot.models import Message
from replyguard.bot.tg import ChatId, TelegramClient
from replyguard.logger import root_logger
from replyguard.settings import WARNING_AUTO_DELETE_DELAY, WARNING_MESSAGE_TEXT

log = root_logger.debug


class BackgroundRunner(Protocol):
    """Anything that runs work after the response, e.g. starlette BackgroundTasks."""

    def add_task(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None: ...


class Moderator:
    """Deletes blocked messages and posts a self-destructing warning."""

    def __init__(
        self,
        client: TelegramClient,
        warning_text: str = WARNING_MESSAGE_TEXT,
        warning_delete_delay: float = WARNING_AUTO_DELETE_DELAY,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            client: Bot API client
            warning_text: Text posted after a message was removed
            warning_delete_delay: Seconds the warning stays visible
            sleep: Coroutine used for the delay
        """
        self.client = client
        self.warning_text = warning_text
        self.warning_delete_delay = warning_delete_delay
        self._sleep = sleep

    async def handle_blocked_message(
        self, message: Message, background: BackgroundRunner, is_edited: bool = False
    ) -> None:
        """
        Delete the message, then warn the chat.

        The warning is sent even when deletion was not confirmed. Its own
        deletion is handed to background so the webhook response is not held.
        """
        chat_id = message.chat.id
        message_id = message.message_id
        suffix = " (edited)" if is_edited else ""

        root_logger.info(f"🗑️ Deleting cross-channel reply {message_id} in chat {chat_id}{suffix}")
        if await self.client.delete_message(chat_id, message_id):
            root_logger.info(f"✅ Deleted cross-channel reply {message_id} in chat {chat_id}")
        else:
            root_logger.error(f"❌ Failed to delete message {message_id} in chat {chat_id}")

        warning = await self.client.send_message(chat_id, self.warning_text, parse_mode="HTML")
        warning_id = warning.get("message_id") if isinstance(warning, dict) else None
        if warning_id is None:
            root_logger.error(f"❌ Failed to send warning message to chat {chat_id}")
            return

        root_logger.info(f"✅ Sent warning message {warning_id} in chat {chat_id}")
        background.add_task(self.delete_warning_later, chat_id, warning_id)

    async def delete_warning_later(self, chat_id: ChatId, message_id: int) -> None:
        """Wait, then remove the warning. Failures are expected and not escalated."""
        log(f"⏰ Deleting warning {message_id} in {self.warning_delete_delay:g}s")
        await self._sleep(self.warning_delete_delay)

        try:
            deleted = await self.client.delete_message(chat_id, message_id)
        except Exception as e:
            log(f"🔍 Warning {message_id} deletion issue in chat {chat_id}: {e}")
            return

        if deleted:
            root_logger.info(f"✅ Auto-deleted warning message {message_id} in chat {chat_id}")
        else:
            # Someone may have removed it already
            log(f"🔍 Warning message {message_id} may already be gone in chat {chat_id}")
