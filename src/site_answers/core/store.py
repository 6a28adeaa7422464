from __future__ import annotations

import json
import logging
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from site_answers.core.errors import SnapshotFormatError
from site_answers.core.models import Document
from site_answers.core.utils import atomic_rename

logger = logging.getLogger(__name__)


def _document_from_dict(i: int, raw: Any) -> Document:
    if not isinstance(raw, dict):
        raise ValueError(f"entry {i} is not an object")
    url = raw.get("url")
    if not isinstance(url, str) or not url:
        raise ValueError(f"entry {i} has no url")
    return Document(
        id=i,
        url=url,
        title=str(raw.get("title") or ""),
        section=str(raw.get("section") or ""),
        text=str(raw.get("text") or ""),
    )


class DocumentStore:
    """Persists the document list (not the derived index) as a JSON snapshot."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> list[Document] | None:
        """Return the persisted documents, or None when no snapshot exists.

        Raises SnapshotFormatError if the file exists but cannot be parsed.
        """

        if not self._path.exists():
            return None
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise SnapshotFormatError(str(self._path), str(e)) from e

        if not isinstance(payload, dict) or not isinstance(payload.get("docs"), list):
            raise SnapshotFormatError(str(self._path), "missing 'docs' list")
        try:
            docs = [_document_from_dict(i, d) for i, d in enumerate(payload["docs"])]
        except ValueError as e:
            raise SnapshotFormatError(str(self._path), str(e)) from e
        logger.info("Snapshot loaded from %s: %s docs", self._path, len(docs))
        return docs

    def save(self, documents: Sequence[Document]) -> None:
        payload = {
            "created_at": datetime.now(timezone.utc).isoformat(),
            "docs": [d.to_dict() for d in documents],
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp: Path | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=self._path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp = Path(f.name)
                json.dump(payload, f, ensure_ascii=False, indent=2)
            atomic_rename(tmp, self._path)
        except Exception:
            if tmp is not None:
                tmp.unlink(missing_ok=True)
            raise
        logger.info("Snapshot saved: %s (%s docs)", self._path, len(documents))


def load_seed_list(path: Path, fallback: str) -> list[str]:
    """Read a JSON array of seed URLs; a missing file seeds from `fallback` alone."""

    if not path.exists():
        logger.info("No seed file at %s; seeding from %s", path, fallback)
        return [fallback]
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"Seed file {path} must contain a JSON array of URLs")
    return [str(u).strip() for u in data if str(u).strip()]
