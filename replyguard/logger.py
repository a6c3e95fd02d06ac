import logging
import os
from pathlib import Path

import colorlog

_lib_path = Path(__file__).parents[1]
_leng_path = len(_lib_path.as_posix())

LEVEL_EMOJI = {
    logging.WARNING: "👷‍♂️",
    logging.ERROR: "❌",
    logging.CRITICAL: "🧨",
}


def basic_filter(record: logging.LogRecord) -> bool:
    """🔍 Attaches the package path and level emoji, never drops a record"""
    record.package = record.pathname[_leng_path + 1 :].replace(".py", "").replace("/", ".")
    record.emoji = LEVEL_EMOJI.get(record.levelno, "")
    return True


color_scheme = {
    "DEBUG": "light_black",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}

fmt_string = "%(emoji)s%(log_color)s%(package)s.%(funcName)s%(reset)s %(white)s%(message)s"


class EmojiColoredFormatter(colorlog.ColoredFormatter):
    """Colored single-line formatter; records from foreign loggers get placeholders."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "emoji"):
            record.emoji = "📝"
        if not hasattr(record, "package"):
            record.package = record.name
        return super().format(record)


formatter = EmojiColoredFormatter(fmt_string, log_colors=color_scheme, style="%", reset=True)


def get_colorful_logger(name: str = "replyguard") -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(os.getenv("LOG_LEVEL", "DEBUG").upper())

    # Re-imports (reloads in tests) must not stack handlers
    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)
        logger.addFilter(basic_filter)

    return logger


root_logger = get_colorful_logger()
