from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

import pytest

from site_answers.core.logging_config import THIRD_PARTY_LOGGERS, configure_logging


@pytest.fixture()
def restore_root_logging():
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    saved_third_party = {name: logging.getLogger(name).level for name in THIRD_PARTY_LOGGERS}
    yield root
    for h in list(root.handlers):
        if h not in saved_handlers:
            root.removeHandler(h)
            h.close()
    for h in saved_handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(saved_level)
    for name, lvl in saved_third_party.items():
        logging.getLogger(name).setLevel(lvl)


def test_writes_to_rotating_file_and_quiets_http_stack(app_config, restore_root_logging) -> None:
    configure_logging(app_config)
    root = restore_root_logging

    file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(app_config.paths.log_path)
    assert root.level == logging.INFO
    assert logging.getLogger("aiohttp.access").level == logging.WARNING

    logging.getLogger("site_answers.test").info("crawl started")
    file_handlers[0].flush()
    assert "INFO site_answers.test: crawl started" in app_config.paths.log_path.read_text(encoding="utf-8")


def test_debug_level_lets_http_stack_through(app_config, restore_root_logging) -> None:
    configure_logging(app_config, level=logging.DEBUG)
    configure_logging(app_config, level=logging.DEBUG)

    root = restore_root_logging
    assert root.level == logging.DEBUG
    assert len([h for h in root.handlers if isinstance(h, RotatingFileHandler)]) == 1
    assert logging.getLogger("aiohttp.client").level == logging.NOTSET
