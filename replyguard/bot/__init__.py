"""
Telegram Bot Module.

Detects and removes replies to external channels in group chats.
"""

from .tg import TelegramClient
from .cache import ChatInfoCache
from .classifier import classify
from .moderation import Moderator
from .handler import MessageProcessor
from .main import BotManager, create_bot_manager

__all__ = [
    "BotManager",
    "ChatInfoCache",
    "MessageProcessor",
    "Moderator",
    "TelegramClient",
    "classify",
    "create_bot_manager",
]
