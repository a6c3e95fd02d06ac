"""
Telegram Bot API client built on aiohttp.

Every call is a single JSON POST with a bounded timeout. Transient failures
are retried with exponential backoff; nothing is ever raised to the caller,
failures resolve to None.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

import aiohttp

from replyguard.logger import root_logger
from replyguard.settings import (
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    RETRY_BACKOFF_BASE,
    RETRYABLE_ERROR_CODES,
    TELEGRAM_API_URL,
    WEBHOOK_MAX_CONNECTIONS,
)

log = root_logger.debug

ChatId = Union[int, str]


class TelegramClient:
    """
    Thin Bot API client.

    The aiohttp session is created lazily on first use, so the client can be
    built outside of a running event loop.
    """

    def __init__(
        self,
        token: str,
        session: Optional[aiohttp.ClientSession] = None,
        *,
        base_url: str = TELEGRAM_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        max_retries: int = MAX_RETRIES,
        backoff_base: float = RETRY_BACKOFF_BASE,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Initialize the client.

        Args:
            token: Bot token
            session: Optional externally owned aiohttp session
            base_url: API root, the token and method name are appended to it
            timeout: Total timeout of one HTTP attempt, seconds
            max_retries: Retries after the first attempt
            backoff_base: First retry delay, doubled on every next retry
            sleep: Coroutine used for backoff delays
        """
        self._token = token
        self._session = session
        self._owns_session = session is None
        self.base_url = base_url
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._sleep = sleep

    def _endpoint(self, method: str) -> str:
        return f"{self.base_url}{self._token}/{method}"

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Close the session if this client created it."""
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None
            log("✅ Bot API session closed")

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number attempt+1."""
        return self.backoff_base * (2**attempt)

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        """
        Call a Bot API method.

        Args:
            method: API method name, e.g. "sendMessage"
            params: JSON body

        Returns:
            The "result" payload, or None when the call was not confirmed
        """
        session = self._get_session()
        url = self._endpoint(method)
        payload = params or {}
        attempts = self.max_retries + 1

        for attempt in range(attempts):
            try:
                async with session.post(
                    url, json=payload, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    # Logical errors come with 4xx/5xx status but a regular envelope
                    data = await response.json(content_type=None)
            except asyncio.TimeoutError:
                root_logger.error(f"⏰ Request timeout for {method}")
            except (aiohttp.ClientError, ValueError) as e:
                root_logger.error(f"❌ Network error for {method}: {type(e).__name__}")
            else:
                if not isinstance(data, dict) or "ok" not in data:
                    root_logger.error(f"❌ Unexpected response body for {method}")
                elif data["ok"]:
                    return data.get("result")
                else:
                    error_code = data.get("error_code")
                    root_logger.warning(
                        f"⚠️ Telegram API error for {method}: {error_code} {data.get('description', '')}"
                    )
                    if error_code not in RETRYABLE_ERROR_CODES:
                        return None

            if attempt + 1 < attempts:
                delay = self.backoff_delay(attempt)
                log(f"🔄 Retrying {method} in {delay:g}s (attempt {attempt + 1}/{self.max_retries})")
                await self._sleep(delay)

        root_logger.error(f"❌ Giving up on {method} after {attempts} attempts")
        return None

    async def get_chat(self, chat_id: ChatId) -> Optional[Dict[str, Any]]:
        return await self.call("getChat", {"chat_id": chat_id})

    async def send_message(
        self,
        chat_id: ChatId,
        text: str,
        parse_mode: Optional[str] = None,
        disable_web_page_preview: bool = False,
    ) -> Optional[Dict[str, Any]]:
        """
        Send a message to a chat.

        Returns:
            The sent message, or None on error
        """
        data: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            data["parse_mode"] = parse_mode
        if disable_web_page_preview:
            data["disable_web_page_preview"] = True
        return await self.call("sendMessage", data)

    async def delete_message(self, chat_id: ChatId, message_id: int) -> bool:
        result = await self.call("deleteMessage", {"chat_id": chat_id, "message_id": message_id})
        return result is not None

    async def set_webhook(
        self,
        url: str,
        allowed_updates: Optional[List[str]] = None,
        drop_pending_updates: bool = False,
        max_connections: int = WEBHOOK_MAX_CONNECTIONS,
        secret_token: Optional[str] = None,
    ) -> bool:
        """
        Register the webhook URL for the bot.

        Args:
            url: HTTPS URL to send updates to
            allowed_updates: Update types to receive
            drop_pending_updates: Drop updates queued while no webhook was set
            max_connections: Maximum simultaneous HTTPS connections from Telegram
            secret_token: Sent back by Telegram in X-Telegram-Bot-Api-Secret-Token

        Returns:
            True on success
        """
        data: Dict[str, Any] = {
            "url": url,
            "max_connections": max_connections,
            "drop_pending_updates": drop_pending_updates,
        }
        if allowed_updates:
            data["allowed_updates"] = allowed_updates
        if secret_token:
            data["secret_token"] = secret_token
        return await self.call("setWebhook", data) is not None

