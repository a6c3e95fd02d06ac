"""
Message Processor for handling Telegram bot updates.
"""

from typing import Any, Dict

from pydantic import ValidationError

from replyguard.bot.cache import ChatInfoCache
from replyguard.bot.classifier import classify
from replyguard.bot.models import Message, Update
from replyguard.bot.moderation import BackgroundRunner, Moderator
from replyguard.bot.tg import TelegramClient
from replyguard.logger import root_logger
from replyguard.settings import HELP_MESSAGE_TEXT, START_MESSAGE_TEXT

log = root_logger.debug

GROUP_CHAT_TYPES = ("group", "supergroup")


class MessageProcessor:
    """
    Routes incoming messages by chat type.

    Group messages are classified and blocked replies handed to the
    moderator. Private chats only get the greeting flow.
    """

    def __init__(self, client: TelegramClient, chat_cache: ChatInfoCache, moderator: Moderator) -> None:
        self.client = client
        self.chat_cache = chat_cache
        self.moderator = moderator

    async def process_update(self, update: Update, background: BackgroundRunner) -> None:
        """Process new and edited messages of one update through the same path."""
        root_logger.info(f"📨 Processing update {update.update_id}")
        for payload, is_edited in update.raw_messages():
            await self.handle_message(payload, background, is_edited=is_edited)

    async def handle_message(
        self, payload: Dict[str, Any], background: BackgroundRunner, is_edited: bool = False
    ) -> None:
        """
        Handle a single raw message.

        Errors are logged and swallowed so one bad message never fails the
        delivery (Telegram would redeliver it).
        """
        try:
            message = Message.model_validate(payload)
        except ValidationError as e:
            root_logger.warning(f"🚫 Invalid message structure received: {e.error_count()} errors")
            return

        try:
            chat_type = message.chat.type
            if chat_type == "private":
                await self._handle_private_message(message)
            elif chat_type in GROUP_CHAT_TYPES:
                await self._handle_group_message(message, background, is_edited)
            else:
                log(f"🔍 Ignoring {chat_type} message (ID: {message.message_id})")
        except Exception as e:
            root_logger.error(f"❌ Error handling message {message.message_id}: {e}")

    async def _handle_group_message(self, message: Message, background: BackgroundRunner, is_edited: bool) -> None:
        # Bot messages (ours included) would otherwise feed back into moderation
        if message.from_user is not None and message.from_user.is_bot:
            log(f"🤖 Ignoring bot message from {message.from_user.display_name}")
            return

        message_info = f"message {message.message_id} in chat {message.chat.id}{' (edited)' if is_edited else ''}"
        log(f"🔍 Processing {message_info}")

        result = await classify(message, self.chat_cache.get_chat_info)

        if result.is_blocked:
            title = result.channel_info.title if result.channel_info else "unknown source"
            root_logger.info(f"🎯 Detected external cross-channel reply: {message_info} from {title}")
            await self.moderator.handle_blocked_message(message, background, is_edited=is_edited)
        elif result.is_cross_channel:
            log(f"✅ Allowing linked channel reply: {message_info}")

    async def _handle_private_message(self, message: Message) -> None:
        """Answer /start with usage info, anything else with a short hint."""
        if not message.text:
            log(f"🔍 Ignoring private message without text (ID: {message.message_id})")
            return

        text = message.text.strip()
        if text == "/start" or text.startswith("/start "):
            user = message.from_user.display_name if message.from_user else message.chat.id
            root_logger.info(f"🎯 Handling /start command from {user}")
            await self.client.send_message(
                message.chat.id, START_MESSAGE_TEXT, parse_mode="Markdown", disable_web_page_preview=True
            )
        else:
            log(f"🔍 Non-start text in private chat {message.chat.id}, sending help")
            await self.client.send_message(message.chat.id, HELP_MESSAGE_TEXT)
