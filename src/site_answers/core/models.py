from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Document:
    id: int
    url: str
    title: str
    section: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "section": self.section,
            "text": self.text,
        }


@dataclass(frozen=True)
class Source:
    url: str
    title: str
    section: str

    def to_dict(self) -> dict[str, str]:
        return {"url": self.url, "title": self.title, "section": self.section}


@dataclass(frozen=True)
class FallbackContact:
    phone: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"phone": self.phone, "email": self.email}


@dataclass(frozen=True)
class ChatAnswer:
    intent: str | None
    answer_text: str
    fallback: FallbackContact
    sources: list[Source] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": True,
            "intent": self.intent,
            "answerText": self.answer_text,
            "sources": [s.to_dict() for s in self.sources],
            "fallback": self.fallback.to_dict(),
        }


@dataclass(frozen=True)
class HealthStatus:
    indexed: bool
    pages: int
    snapshot_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"ok": True, "pages": self.pages, "indexed": self.indexed}
        if self.snapshot_error:
            out["snapshotError"] = self.snapshot_error
        return out
