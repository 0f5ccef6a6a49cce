"""
Data models for the SiteDigest crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class Heading:
    """One ``h1``..``h6`` element: numeric level and trimmed text."""

    level: int
    text: str


@dataclass(slots=True)
class Page:
    """Structured content extracted from one fetched HTML document."""

    url: str
    title: str
    meta_description: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    headings: List[Heading] = field(default_factory=list)
    paragraphs: List[str] = field(default_factory=list)
    extract: Optional[str] = None

    def content_length(self) -> int:
        return sum(len(p) for p in self.paragraphs)

    def truncate_content(self, max_length: int) -> None:
        """Drop trailing paragraphs until the total length fits *max_length*.

        Paragraphs are never cut in the middle; the kept prefix may
        undershoot the limit.
        """
        total = 0
        kept: List[str] = []
        for paragraph in self.paragraphs:
            if total + len(paragraph) > max_length:
                break
            kept.append(paragraph)
            total += len(paragraph)
        self.paragraphs = kept

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "title": self.title,
            "meta_description": self.meta_description,
            "author": self.author,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "headings": [{"level": h.level, "text": h.text} for h in self.headings],
            "paragraphs": list(self.paragraphs),
            "extract": self.extract,
        }
