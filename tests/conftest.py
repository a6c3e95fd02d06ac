"""Общие фикстуры: фейковый Bot API клиент, фабрики сообщений, фоновые задачи"""

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from replyguard.bot.models import Message
from replyguard.bot.tg import TelegramClient

GROUP_ID = -1001111111111
LINKED_CHANNEL_ID = -100999
EXTERNAL_CHANNEL_ID = -100123
WARNING_MESSAGE_ID = 777


def default_responses() -> Dict[str, Any]:
    return {
        "getChat": {"id": GROUP_ID, "type": "supergroup", "title": "Test group", "linked_chat_id": LINKED_CHANNEL_ID},
        "deleteMessage": True,
        "sendMessage": lambda params: {"message_id": WARNING_MESSAGE_ID, "chat": {"id": params["chat_id"]}},
        "setWebhook": True,
    }


class FakeTelegramClient(TelegramClient):
    """Records calls instead of talking to Telegram. Responses may be values or callables."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None) -> None:
        super().__init__("123456:TEST")
        self.responses = default_responses()
        self.responses.update(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def call(self, method: str, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
        params = params or {}
        self.calls.append((method, params))
        response = self.responses.get(method)
        if callable(response):
            return response(params)
        return response

    async def close(self) -> None:
        pass

    @property
    def methods(self) -> List[str]:
        return [method for method, _ in self.calls]

    def params_of(self, method: str) -> List[Dict[str, Any]]:
        return [params for name, params in self.calls if name == method]


class FakeBackground:
    """Collects tasks like starlette BackgroundTasks, runs them on demand."""

    def __init__(self) -> None:
        self.tasks: List[Tuple[Callable[..., Any], tuple]] = []

    def add_task(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self.tasks.append((func, args))

    async def run_all(self) -> None:
        for func, args in self.tasks:
            await func(*args)


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_client() -> FakeTelegramClient:
    return FakeTelegramClient()


@pytest.fixture
def background() -> FakeBackground:
    return FakeBackground()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def group_message_payload(
    message_id: int = 42,
    chat_id: int = GROUP_ID,
    chat_type: str = "supergroup",
    is_bot: bool = False,
    **extra: Any,
) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "message_id": message_id,
        "date": 1700000000,
        "chat": {"id": chat_id, "type": chat_type, "title": "Test group"},
        "from": {"id": 5001, "is_bot": is_bot, "first_name": "Alice", "username": "alice"},
        "text": "hello",
    }
    payload.update(extra)
    return payload


def channel(chat_id: int, title: str = "Some channel") -> Dict[str, Any]:
    return {"id": chat_id, "type": "channel", "title": title, "username": "somechannel"}


@pytest.fixture
def make_payload() -> Callable[..., Dict[str, Any]]:
    return group_message_payload


@pytest.fixture
def make_message() -> Callable[..., Message]:
    def factory(**kwargs: Any) -> Message:
        return Message.model_validate(group_message_payload(**kwargs))

    return factory


@pytest.fixture
def make_channel() -> Callable[..., Dict[str, Any]]:
    return channel
