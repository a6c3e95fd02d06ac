"""Cross-channel reply guard for Telegram groups"""

from replyguard.settings import APP_VERSION as __version__

__all__ = ["__version__"]
