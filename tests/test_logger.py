"""Тесты цветного логгера"""

import logging
import re
from pathlib import Path

import replyguard
from replyguard.logger import EmojiColoredFormatter, basic_filter, fmt_string, root_logger

PACKAGE_DIR = Path(replyguard.__file__).parent
ANSI = re.compile(r"\x1b\[[0-9;]*m")


def make_record(level, relative_path="", name="replyguard"):
    pathname = (PACKAGE_DIR / relative_path).as_posix() if relative_path else ""
    return logging.LogRecord(name, level, pathname, 10, "hello", None, None, func="handle")


class TestLogger:
    """Тесты фильтра и форматтера"""

    def setup_method(self):
        self.formatter = EmojiColoredFormatter(fmt_string, style="%")

    def render(self, record):
        return ANSI.sub("", self.formatter.format(record))

    def test_filter_sets_package_and_emoji(self):
        record = make_record(logging.ERROR, "bot/tg.py")

        assert basic_filter(record) is True
        assert record.package == "replyguard.bot.tg"
        assert record.emoji == "❌"

    def test_info_has_no_emoji(self):
        record = make_record(logging.INFO, "main.py")
        basic_filter(record)

        assert record.emoji == ""

    def test_single_line_output(self):
        record = make_record(logging.WARNING, "main.py")
        basic_filter(record)

        output = self.render(record)

        assert output == "👷‍♂️replyguard.main.handle hello"
        assert "\n" not in output

    def test_foreign_record_gets_placeholders(self):
        assert self.render(make_record(logging.INFO, name="uvicorn")) == "📝uvicorn.handle hello"

    def test_single_handler(self):
        assert root_logger.name == "replyguard"
        assert len(root_logger.handlers) == 1
