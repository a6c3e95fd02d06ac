"""
Models for Telegram Bot API payloads and classification results.
"""

from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class TelegramModel(BaseModel):
    """Base for Bot API objects: unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class User(TelegramModel):
    """Telegram user."""

    id: int
    is_bot: bool = False
    first_name: Optional[str] = None
    username: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.username or self.first_name or str(self.id)


class Chat(TelegramModel):
    """Telegram chat."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None


class ChatInfo(Chat):
    """Full chat metadata as returned by getChat."""

    linked_chat_id: Optional[int] = None


class MessageOrigin(TelegramModel):
    """Origin of a forwarded message or an external reply (Bot API 7+)."""

    type: str
    date: Optional[int] = None
    chat: Optional[Chat] = None
    sender_user_name: Optional[str] = None

    @property
    def channel(self) -> Optional[Chat]:
        """Source channel, if the origin is one."""
        if self.type == "channel" and self.chat and self.chat.type == "channel":
            return self.chat
        return None


class ExternalReplyInfo(TelegramModel):
    """Message being replied to that lives in another chat."""

    origin: Optional[MessageOrigin] = None
    chat: Optional[Chat] = None
    message_id: Optional[int] = None


class Message(TelegramModel):
    """Telegram message, reduced to what dispatch and classification use."""

    message_id: int
    chat: Chat
    from_user: Optional[User] = Field(default=None, alias="from")
    date: int = 0
    text: Optional[str] = None
    sender_chat: Optional[Chat] = None
    external_reply: Optional[ExternalReplyInfo] = None
    reply_to_message: Optional["Message"] = None
    forward_origin: Optional[MessageOrigin] = None
    forward_from_chat: Optional[Chat] = None
    forward_sender_name: Optional[str] = None
    forward_signature: Optional[str] = None
    forward_date: Optional[int] = None


class Update(TelegramModel):
    """
    Webhook update envelope.

    Message payloads are kept raw here and validated one by one,
    so a single malformed message does not reject the whole update.
    """

    update_id: int = Field(gt=0)
    message: Optional[Dict[str, Any]] = None
    edited_message: Optional[Dict[str, Any]] = None

    def raw_messages(self) -> Iterator[Tuple[Dict[str, Any], bool]]:
        """Yield (payload, is_edited) pairs for every message in the update."""
        if self.message is not None:
            yield self.message, False
        if self.edited_message is not None:
            yield self.edited_message, True


class ReplyType(str, Enum):
    """How a message refers to channel content."""

    NONE = "none"
    EXTERNAL_REPLY = "external_reply"
    FORWARD_FROM_CHANNEL = "forward_from_channel"
    SENDER_CHAT_CHANNEL = "sender_chat_channel"
    HIDDEN_FORWARD = "hidden_forward"
    CHANNEL_SIGNATURE = "channel_signature"


class ChannelInfo(TelegramModel):
    """Channel a cross-channel reply points to. id is None when unresolvable."""

    id: Optional[int] = None
    title: str
    username: Optional[str] = None

    @classmethod
    def from_chat(cls, chat: Chat) -> "ChannelInfo":
        return cls(id=chat.id, title=chat.title or "Unknown Channel", username=chat.username)


class ClassificationResult(TelegramModel):
    """Verdict for a single message. Never persisted."""

    is_cross_channel: bool = False
    is_external: bool = False
    reply_type: ReplyType = ReplyType.NONE
    channel_info: Optional[ChannelInfo] = None

    @property
    def is_blocked(self) -> bool:
        return self.is_cross_channel and self.is_external
