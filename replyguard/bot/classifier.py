"""
Cross-channel reply detection.

A message is a cross-channel reply when it points, directly or through a
forwarded or signed intermediary, at content that came from a channel.
Replies sourced from the group's linked channel are allowed, everything
else is external and gets blocked.
"""

from typing import Awaitable, Callable, Optional, Tuple

from replyguard.bot.models import (
    Chat,
    ChannelInfo,
    ChatInfo,
    ClassificationResult,
    Message,
    ReplyType,
)
from replyguard.logger import root_logger

log = root_logger.debug

ChatInfoLookup = Callable[[int], Awaitable[Optional[ChatInfo]]]


def is_linked_channel(chat_info: Optional[ChatInfo], channel_id: Optional[int]) -> bool:
    """True only if chat_info names channel_id as its linked channel."""
    if chat_info is None or chat_info.linked_chat_id is None or channel_id is None:
        return False
    return chat_info.linked_chat_id == channel_id


def _is_channel(chat: Optional[Chat]) -> bool:
    return chat is not None and chat.type == "channel"


def find_source_channel(message: Message) -> Tuple[ReplyType, Optional[Chat]]:
    """
    Find a resolvable channel the message replies to.

    Returns:
        (reply type, channel chat), or (ReplyType.NONE, None)
    """
    external = message.external_reply
    if external is not None:
        if _is_channel(external.chat):
            return ReplyType.EXTERNAL_REPLY, external.chat
        if external.origin is not None and external.origin.channel is not None:
            return ReplyType.EXTERNAL_REPLY, external.origin.channel

    reply = message.reply_to_message
    if reply is None:
        return ReplyType.NONE, None

    if _is_channel(reply.forward_from_chat):
        return ReplyType.FORWARD_FROM_CHANNEL, reply.forward_from_chat
    if reply.forward_origin is not None and reply.forward_origin.channel is not None:
        return ReplyType.FORWARD_FROM_CHANNEL, reply.forward_origin.channel

    if _is_channel(reply.sender_chat):
        return ReplyType.SENDER_CHAT_CHANNEL, reply.sender_chat

    return ReplyType.NONE, None


def find_unresolvable_origin(message: Message) -> Optional[ClassificationResult]:
    """
    Detect replies to forwards whose source chat is hidden or only signed.

    These are always external: the origin cannot be checked against the
    linked channel, so no metadata lookup is made.
    """
    reply = message.reply_to_message
    if reply is None:
        return None

    origin = reply.forward_origin
    if reply.forward_sender_name or reply.forward_date or (origin is not None and origin.channel is None):
        sender_name = reply.forward_sender_name or (origin.sender_user_name if origin else None)
        return ClassificationResult(
            is_cross_channel=True,
            is_external=True,
            reply_type=ReplyType.HIDDEN_FORWARD,
            channel_info=ChannelInfo(title=sender_name or "Hidden Source"),
        )

    if reply.forward_signature:
        return ClassificationResult(
            is_cross_channel=True,
            is_external=True,
            reply_type=ReplyType.CHANNEL_SIGNATURE,
            channel_info=ChannelInfo(title=f"Channel (signature: {reply.forward_signature})"),
        )

    return None


async def classify(message: Message, get_chat_info: ChatInfoLookup) -> ClassificationResult:
    """
    Decide whether a message is a cross-channel reply and whether it is external.

    Rules are checked in priority order and the first match wins. Chat
    metadata is looked up only when a resolvable channel was found.

    Args:
        message: Incoming group message
        get_chat_info: Async lookup of the current chat's metadata

    Returns:
        ClassificationResult
    """
    reply_type, channel = find_source_channel(message)

    if channel is not None:
        chat_info = await get_chat_info(message.chat.id)
        linked = is_linked_channel(chat_info, channel.id)
        channel_info = ChannelInfo.from_chat(channel)
        log(
            f"Message {message.message_id} ({reply_type.value}) points to "
            f"{'LINKED' if linked else 'EXTERNAL'} channel {channel_info.title}"
        )
        return ClassificationResult(
            is_cross_channel=True,
            is_external=not linked,
            reply_type=reply_type,
            channel_info=channel_info,
        )

    hidden = find_unresolvable_origin(message)
    if hidden is not None:
        log(f"Message {message.message_id} replies to {hidden.reply_type.value} ({hidden.channel_info.title})")
        return hidden

    return ClassificationResult()
