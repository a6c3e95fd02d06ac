"""Application settings"""

import os

from dotenv import load_dotenv

load_dotenv()

APP_VERSION = "2.0.0"

# Telegram
TELEGRAM_API_URL = "https://api.telegram.org/bot"
BOT_TOKEN = os.getenv("BOT_TOKEN") or os.getenv("TELEGRAM_BOT_TOKEN")
# Overrides the callback URL derived from the /setup request
WEBHOOK_URL = os.getenv("WEBHOOK_URL") or None
WEBHOOK_SECRET = os.getenv("WEBHOOK_SECRET") or None
ALLOWED_UPDATES = ["message", "edited_message"]
WEBHOOK_MAX_CONNECTIONS = 40

# Moderation
WARNING_MESSAGE_TEXT = os.getenv("WARNING_MESSAGE_TEXT", "⚠️ 本群禁止跨频道回复内容")
WARNING_AUTO_DELETE_DELAY = float(os.getenv("WARNING_AUTO_DELETE_DELAY", "10"))

# Bot API client (seconds)
REQUEST_TIMEOUT = float(os.getenv("REQUEST_TIMEOUT", "30"))
MAX_RETRIES = int(os.getenv("MAX_RETRIES", "3"))
RETRY_BACKOFF_BASE = float(os.getenv("RETRY_BACKOFF_BASE", "1"))
# Rate limited, bad gateway, service unavailable, gateway timeout
RETRYABLE_ERROR_CODES = frozenset({429, 502, 503, 504})

# Chat info cache (seconds)
CACHE_TTL = float(os.getenv("CACHE_TTL", "300"))

# Inbound rate limiting
RATE_LIMIT_WINDOW = float(os.getenv("RATE_LIMIT_WINDOW", "60"))
MAX_REQUESTS_PER_WINDOW = int(os.getenv("MAX_REQUESTS_PER_WINDOW", "30"))

START_MESSAGE_TEXT = """🤖 跨频道回复拦截机器人

📋 **功能说明**
本机器人可以自动删除 Telegram 群组中的跨频道回复消息，区分已关联频道（允许）和外部频道（禁止）。

🔧 **使用方法**
• 将机器人拉进群组
• 设置为管理员并给予"删除消息"和"发送消息"权限
• 无需任何其他配置，机器人自动开始工作

💡 **原理**
机器人会自动区分关联频道回复（允许）和外部频道回复（删除并警告）。"""

HELP_MESSAGE_TEXT = """❓ 请发送 /start 查看使用说明

或者直接将我添加到群组中并设为管理员即可开始使用。"""
