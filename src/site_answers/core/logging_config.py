from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from site_answers.core.config import AppConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Per-request chatter from the HTTP stack drowns out crawl progress at INFO.
THIRD_PARTY_LOGGERS = ("aiohttp.access", "aiohttp.client", "aiohttp.internal", "charset_normalizer")


def configure_logging(config: AppConfig, *, level: int = logging.INFO) -> None:
    """Log to a rotating file in the data directory and to the console.

    Third-party loggers stay at WARNING unless `level` is DEBUG.
    """

    fmt = logging.Formatter(LOG_FORMAT)

    config.paths.log_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        config.paths.log_path,
        maxBytes=2_000_000,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(fmt)

    console = logging.StreamHandler()
    console.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(level)
    for h in list(root.handlers):
        root.removeHandler(h)
        if isinstance(h, RotatingFileHandler):
            h.close()
    root.addHandler(file_handler)
    root.addHandler(console)

    third_party_level = logging.NOTSET if level <= logging.DEBUG else logging.WARNING
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    logging.getLogger(__name__).debug(
        "Logging to %s (crawl origin %s)", config.paths.log_path, config.crawl.origin
    )
