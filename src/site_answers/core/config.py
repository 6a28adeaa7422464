from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

logger = logging.getLogger(__name__)


DEFAULT_ORIGIN = "https://getinvolved.ucsd.edu"
DEFAULT_USER_AGENT = "UCSD-CSI-Chatbot/1.0 (+contact: csifrontdesk@ucsd.edu)"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %s", name, raw, default)
        return default


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "y", "on")


@dataclass(frozen=True)
class AppPaths:
    app_dir: Path
    data_dir: Path
    snapshot_path: Path
    seeds_path: Path
    log_path: Path

    @classmethod
    def under(cls, app_dir: Path) -> "AppPaths":
        data_dir = app_dir / "data"
        return cls(
            app_dir=app_dir,
            data_dir=data_dir,
            snapshot_path=data_dir / "index.json",
            seeds_path=app_dir / "seeds.json",
            log_path=data_dir / "site_answers.log",
        )


@dataclass(frozen=True)
class CrawlSettings:
    origin: str = DEFAULT_ORIGIN
    max_pages: int = 900
    concurrency: int = 6
    timeout_seconds: float = 15.0
    max_redirects: int = 5
    # Fetch starts are capped to `concurrency` per this many seconds.
    rate_interval_seconds: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class AnswerSettings:
    fallback_phone: str = "858-534-1733"
    contact_email: str = "csifrontdesk@ucsd.edu"
    cross_topic_expansion: bool = True
    max_sources: int = 3
    max_sentences: int = 3
    default_snippet_terms: tuple[str, ...] = ("student", "organization", "csi")


@dataclass(frozen=True)
class AppConfig:
    paths: AppPaths
    crawl: CrawlSettings = field(default_factory=CrawlSettings)
    answer: AnswerSettings = field(default_factory=AnswerSettings)

    @classmethod
    def load(cls, env: Mapping[str, str] | None = None) -> "AppConfig":
        env = os.environ if env is None else env
        app_dir = Path(env.get("SITE_ANSWERS_HOME") or os.getcwd()).expanduser().resolve()
        paths = AppPaths.under(app_dir)
        paths.data_dir.mkdir(parents=True, exist_ok=True)

        origin = (env.get("SITE_ANSWERS_ORIGIN") or DEFAULT_ORIGIN).strip().rstrip("/")
        timeout_ms = _env_int(env, "TIMEOUT_MS", 15000)
        crawl = CrawlSettings(
            origin=origin,
            max_pages=max(1, _env_int(env, "MAX_PAGES", 900)),
            concurrency=max(1, _env_int(env, "CONCURRENCY", 6)),
            timeout_seconds=max(1, timeout_ms) / 1000.0,
            user_agent=(env.get("SITE_ANSWERS_USER_AGENT") or DEFAULT_USER_AGENT).strip(),
        )
        answer = AnswerSettings(
            fallback_phone=env.get("FALLBACK_PHONE") or AnswerSettings.fallback_phone,
            contact_email=env.get("CONTACT_EMAIL") or AnswerSettings.contact_email,
            cross_topic_expansion=_env_bool(env, "CROSS_TOPIC_EXPANSION", True),
        )
        return cls(paths=paths, crawl=crawl, answer=answer)
