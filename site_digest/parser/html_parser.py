# === FILE: site_digest/parser/html_parser.py ===
"""HTML extraction for SiteDigest.

Turns one fetched document into a :class:`~site_digest.crawler.models.Page`
plus the list of outbound links found in it:

* title: first ``<title>`` text, or :data:`TITLE_NOT_FOUND`.
* meta description / author: ``content`` of the first matching ``<meta name>``.
* published date: first ``<time datetime>`` parsed as RFC 3339, else None.
* headings / paragraphs: trimmed text in document order, empty ones dropped.

Paragraphs are trimmed from the end so their summed length never exceeds
``max_content_length``. ``extract`` falls back from the meta description
to the first paragraph.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_digest.crawler.models import Heading, Page
from site_digest.utils import is_http_url, normalize_url, remove_duplicates

__all__: Sequence[str] = ("TITLE_NOT_FOUND", "ParsedPage", "extract_page", "extract_links", "parse_page")

TITLE_NOT_FOUND = "Title not found"

_HEADING_SELECTOR = "h1, h2, h3, h4, h5, h6"


@dataclass(slots=True)
class ParsedPage:
    """Extracted page together with the absolute links it contains."""

    page: Page
    links: list[str]


def _meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.select_one(f'meta[name="{name}"]')
    if tag is None:
        return None
    content = tag.get("content")
    return content if isinstance(content, str) else None


def _parse_rfc3339(value: str) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp; naive or malformed values yield None."""
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed.astimezone(timezone.utc)


def _published_at(soup: BeautifulSoup) -> Optional[datetime]:
    tag = soup.select_one("time")
    if tag is None:
        return None
    value = tag.get("datetime")
    return _parse_rfc3339(value) if isinstance(value, str) else None


def extract_page(document: Union[BeautifulSoup, str], url: str, max_content_length: int) -> Page:
    """Build a :class:`Page` from parsed markup (or raw HTML) fetched from *url*."""
    soup = document if isinstance(document, BeautifulSoup) else BeautifulSoup(document, "html.parser")

    title_tag = soup.select_one("title")
    title = title_tag.get_text().strip() if title_tag is not None else TITLE_NOT_FOUND

    page = Page(url=url, title=title)
    page.meta_description = _meta_content(soup, "description")
    page.author = _meta_content(soup, "author")
    page.published_at = _published_at(soup)

    for tag in soup.select(_HEADING_SELECTOR):
        text = tag.get_text().strip()
        if text:
            page.headings.append(Heading(level=int(tag.name[1]), text=text))

    for tag in soup.select("p"):
        text = tag.get_text().strip()
        if text:
            page.paragraphs.append(text)

    if page.content_length() > max_content_length:
        page.truncate_content(max_content_length)

    if page.meta_description is not None:
        page.extract = page.meta_description
    elif page.paragraphs:
        page.extract = page.paragraphs[0]
    return page


def extract_links(soup: BeautifulSoup, page_url: str) -> list[str]:
    """
    Absolute http(s) links from ``<a href>``, resolved against *page_url*.

    Links pass through :func:`~site_digest.utils.normalize_url`,
    ``mailto:``/``javascript:`` are ignored and the result is de-duplicated
    in document order. Domain filtering is left to the caller.
    """
    links: list[str] = []
    for tag in soup.select("a[href]"):
        if not isinstance(tag, Tag):
            continue
        href = tag.get("href")
        if not isinstance(href, str):
            continue
        raw = href.strip()
        if not raw or raw.startswith(("mailto:", "javascript:", "#")):
            continue
        try:
            absolute = normalize_url(urljoin(page_url, raw))
            if is_http_url(absolute):
                links.append(absolute)
        except ValueError:
            continue
    return remove_duplicates(links)


def parse_page(html: str, url: str, max_content_length: int) -> ParsedPage:
    """Parse *html* once and return both the page record and its links."""
    soup = BeautifulSoup(html, "html.parser")
    return ParsedPage(page=extract_page(soup, url, max_content_length), links=extract_links(soup, url))
