"""Reshape raw Pressbooks REST payloads into the records the tools consume."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from utils.html_text import count_words, html_to_plain_text, strip_html
from utils.record import read_field

UNTITLED_BOOK = "Untitled"
UNTITLED_PART = "Untitled Part"
UNTITLED_CHAPTER = "Untitled Chapter"
PUBLISHED_STATUS = "publish"


@dataclass(frozen=True)
class CatalogueEntry:
    id: Any
    title: str
    link: str
    author: str = ""
    license: str = ""
    subject: str = ""
    in_catalog: bool = False
    word_count: int = 0
    last_updated: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "author": self.author,
            "license": self.license,
            "subject": self.subject,
            "inCatalog": self.in_catalog,
            "wordCount": self.word_count,
            "lastUpdated": self.last_updated,
        }


@dataclass(frozen=True)
class TocChapter:
    id: Any
    title: str
    slug: Optional[str]
    link: Optional[str]
    word_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "slug": self.slug,
            "link": self.link,
            "wordCount": self.word_count,
        }


@dataclass(frozen=True)
class TocPart:
    id: Any
    title: str
    chapters: Tuple[TocChapter, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "chapters": [chapter.to_dict() for chapter in self.chapters],
        }


@dataclass(frozen=True)
class ChapterContent:
    id: Any
    title: str
    link: str
    word_count: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "link": self.link,
            "wordCount": self.word_count,
            "text": self.text,
        }


def _join_names(items: object) -> str:
    if not isinstance(items, list):
        return ""
    names = []
    for item in items:
        name = read_field(item, "name") if isinstance(item, dict) else None
        if name:
            names.append(str(name))
    return ", ".join(names)


def _non_negative_int(value: object) -> int:
    if isinstance(value, bool):
        return 0
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return 0
    return parsed if parsed > 0 else 0


def _text_or_empty(value: object) -> str:
    if value is None:
        return ""
    return str(value)


def _rendered(raw: Dict[str, Any], key: str) -> str:
    nested = read_field(raw, key)
    if isinstance(nested, dict):
        return _text_or_empty(nested.get("rendered"))
    return ""


def parse_book(raw: Dict[str, Any]) -> CatalogueEntry:
    """Map one raw network book record to a CatalogueEntry."""
    meta = read_field(raw, "metadata")
    if not isinstance(meta, dict):
        meta = {}

    title = (_text_or_empty(meta.get("name") or read_field(raw, "title")) or UNTITLED_BOOK).strip()
    if not title:
        title = UNTITLED_BOOK

    link = _text_or_empty(read_field(raw, "link"))
    if link.endswith("/"):
        link = link[:-1]

    license_info = meta.get("license")
    license_value = ""
    if isinstance(license_info, dict):
        license_value = _text_or_empty(license_info.get("code") or license_info.get("name"))

    return CatalogueEntry(
        id=read_field(raw, "id"),
        title=title,
        link=link,
        author=_join_names(meta.get("author")),
        license=license_value,
        subject=_join_names(meta.get("about")),
        in_catalog=meta.get("inCatalog") is True,
        word_count=_non_negative_int(meta.get("wordCount")),
        last_updated=_text_or_empty(meta.get("lastUpdated")),
    )


def _parse_chapter_entry(raw: Dict[str, Any]) -> Optional[TocChapter]:
    if read_field(raw, "status") != PUBLISHED_STATUS:
        return None
    if not read_field(raw, "has_post_content"):
        return None
    return TocChapter(
        id=read_field(raw, "id"),
        title=read_field(raw, "title") or UNTITLED_CHAPTER,
        slug=read_field(raw, "slug"),
        link=read_field(raw, "link"),
        word_count=_non_negative_int(read_field(raw, "word_count")),
    )


def parse_toc(raw_toc: Dict[str, Any]) -> List[TocPart]:
    """Simplify a book TOC to parts holding published chapters with content.

    Parts with no chapters upstream, or with none left after filtering, are
    dropped.
    """
    raw_parts = read_field(raw_toc, "parts") if isinstance(raw_toc, dict) else None
    if not isinstance(raw_parts, list):
        return []

    parts: List[TocPart] = []
    for raw_part in raw_parts:
        if not isinstance(raw_part, dict):
            continue
        raw_chapters = raw_part.get("chapters")
        if not isinstance(raw_chapters, list) or not raw_chapters:
            continue

        chapters = []
        for raw_chapter in raw_chapters:
            if not isinstance(raw_chapter, dict):
                continue
            chapter = _parse_chapter_entry(raw_chapter)
            if chapter is not None:
                chapters.append(chapter)

        if not chapters:
            continue
        parts.append(
            TocPart(
                id=raw_part.get("id"),
                title=raw_part.get("title") or UNTITLED_PART,
                chapters=tuple(chapters),
            )
        )
    return parts


def parse_chapter(raw: Dict[str, Any]) -> ChapterContent:
    if not isinstance(raw, dict):
        raw = {}
    text = html_to_plain_text(_rendered(raw, "content"))
    title = _rendered(raw, "title") or UNTITLED_CHAPTER
    return ChapterContent(
        id=raw.get("id"),
        title=strip_html(title),
        link=_text_or_empty(raw.get("link")),
        word_count=count_words(text),
        text=text,
    )
