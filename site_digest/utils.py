# File: site_digest/utils.py
"""site_digest.utils: helpers for URL handling shared by the parser and the crawler."""

from __future__ import annotations

from typing import Collection, List, Optional, Sequence
from urllib.parse import urlparse, urlsplit, urlunsplit

from site_digest.logger import logger

__all__: Sequence[str] = (
    "extract_domain",
    "is_http_url",
    "is_same_domain",
    "normalize_url",
    "remove_duplicates",
)


def extract_domain(url: str) -> Optional[str]:
    """Lower-cased host of *url* without port, or None if there is none."""
    return urlparse(url).hostname


def is_http_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_same_domain(url: str, domain: Optional[str]) -> bool:
    """True when *url* is http(s) and its host equals *domain*."""
    try:
        same = is_http_url(url) and domain is not None and extract_domain(url) == domain
    except ValueError as exc:
        # malformed netloc, e.g. an unterminated IPv6 literal
        logger.debug("Unparsable URL %s: %s", url, exc)
        return False
    return same


_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """
    Canonical form used for de-duplication: lower-cased scheme and host,
    default port dropped, empty path replaced by ``/``, fragment removed.

    Raises ValueError for a malformed port or netloc.
    """
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    userinfo, at, hostport = parts.netloc.rpartition("@")
    hostport = hostport.lower()
    if parts.port is not None and parts.port == _DEFAULT_PORTS.get(scheme):
        hostport = hostport.rsplit(":", 1)[0]
    path = parts.path or ("/" if parts.netloc else "")
    return urlunsplit((scheme, f"{userinfo}{at}{hostport}", path, parts.query, ""))


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
