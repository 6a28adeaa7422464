from __future__ import annotations

import logging
from typing import Protocol

from bs4 import BeautifulSoup

from site_answers.core.models import Document
from site_answers.core.utils import collapse_whitespace

logger = logging.getLogger(__name__)


NON_CONTENT_TAGS = ["script", "style", "noscript", "iframe", "template"]
SECTION_SEPARATOR = " • "


class HtmlPage(Protocol):
    def title(self) -> str: ...

    def headings(self, level: int) -> list[str]: ...

    def main_text(self) -> str: ...

    def links(self) -> list[str]: ...


class SoupPage:
    """BeautifulSoup-backed HtmlPage with non-content elements already removed."""

    def __init__(self, html: str) -> None:
        self._soup = BeautifulSoup(html or "", "lxml")
        # Anchors are collected before pruning so hidden navigation still feeds discovery.
        self._hrefs = [str(a.get("href")) for a in self._soup.find_all("a", href=True)]
        for tag in self._soup(NON_CONTENT_TAGS):
            tag.decompose()
        for tag in self._soup.find_all(attrs={"hidden": True}):
            tag.decompose()

    def title(self) -> str:
        t = self._soup.title
        return t.get_text().strip() if t is not None else ""

    def headings(self, level: int) -> list[str]:
        out: list[str] = []
        for h in self._soup.find_all(f"h{level}"):
            text = collapse_whitespace(h.get_text(" "))
            if text:
                out.append(text)
        return out

    def main_text(self) -> str:
        main = self._soup.find("main") or self._soup.find(attrs={"role": "main"})
        if main is not None:
            text = collapse_whitespace(main.get_text(" "))
            if text:
                return text
        body = self._soup.body or self._soup
        return collapse_whitespace(body.get_text(" "))

    def links(self) -> list[str]:
        return list(self._hrefs)


def section_of(page: HtmlPage) -> str:
    h1 = page.headings(1)
    if h1:
        return SECTION_SEPARATOR.join(h1)
    h2 = page.headings(2)
    return h2[0] if h2 else ""


def extract_document(url: str, page: HtmlPage, *, doc_id: int = 0) -> Document:
    return Document(
        id=doc_id,
        url=url,
        title=page.title(),
        section=section_of(page),
        text=page.main_text(),
    )
