from __future__ import annotations

import os
import re
from pathlib import Path
from urllib.parse import urljoin

from yarl import URL

_WS_RE = re.compile(r"\s+")


def normalize_url(url: str, base: str | None = None) -> str:
    """Canonical page identity: no fragment, no trailing slash.

    Idempotent, so a normalized URL can be normalized again safely.
    """

    url = (url or "").strip()
    if base:
        url = urljoin(base, url)
    url = url.split("#", 1)[0]
    return url.rstrip("/")


def origin_key(url: str) -> tuple[str, str, int] | None:
    try:
        u = URL(url)
    except (TypeError, ValueError):
        return None
    if u.scheme not in ("http", "https") or not u.host:
        return None
    port = u.port
    if port is None:
        return None
    return (u.scheme, u.host.lower(), port)


def is_same_origin(url: str, origin: str) -> bool:
    key = origin_key(url)
    return key is not None and key == origin_key(origin)


def collapse_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text or "").strip()


def atomic_rename(src: Path, dst: Path) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    os.replace(src, dst)
