from __future__ import annotations

import re
from typing import Iterator, Optional
from urllib.parse import SplitResult, urljoin, urlsplit

from bs4 import BeautifulSoup

SAME_SITE_MODES = ("host", "substring")

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class MarkupError(Exception):
    """Fetched body could not be parsed into a document tree."""


def parse_document(body: str) -> BeautifulSoup:
    try:
        return BeautifulSoup(body, "html.parser")
    except Exception as exc:  # bs4 surfaces parser rejections with varying types
        raise MarkupError(str(exc) or exc.__class__.__name__) from exc


def _split_reference(ref: str) -> SplitResult:
    """
    Strict URI parse. urlsplit alone accepts almost anything, so also reject
    control characters, malformed percent escapes outside the query, bad
    ports, and scheme-less references whose first path segment holds a colon
    (such a segment would read as a scheme). Raises ValueError.
    """
    if _CONTROL_CHARS.search(ref):
        raise ValueError(f"control character in {ref!r}")
    parts = urlsplit(ref)
    if not parts.scheme and not parts.netloc and ":" in parts.path.split("/", 1)[0]:
        raise ValueError(f"first path segment cannot contain colon in {ref!r}")
    for piece in (parts.netloc, parts.path, parts.fragment):
        if _BAD_ESCAPE.search(piece):
            raise ValueError(f"invalid escape in {ref!r}")
    parts.port  # raises ValueError for a non-numeric or out-of-range port
    return parts


def resolve_url(base: str, href: str) -> Optional[str]:
    """
    Compose ``href`` against ``base`` (RFC 3986 reference resolution).
    Returns None when either side fails to parse.
    """
    href = href.strip()
    try:
        _split_reference(base)
        _split_reference(href)
        return urljoin(base, href)
    except ValueError:
        return None


def iter_links(document: BeautifulSoup, base_url: str) -> Iterator[str]:
    """
    Yield the resolved target of every <a href> in document order, which is a
    depth-first pre-order walk of the tree. Unresolvable links are skipped.
    """
    for anchor in document.find_all("a", href=True):
        href = anchor.get("href")
        if not isinstance(href, str):
            continue
        resolved = resolve_url(base_url, href)
        if resolved is not None:
            yield resolved


def normalize_domain(domain: str) -> str:
    """Seed domains are scheme-less; drop one if the user supplied it."""
    domain = domain.strip()
    for prefix in ("https://", "http://"):
        if domain.startswith(prefix):
            return domain[len(prefix):]
    return domain


def seed_url(domain: str) -> str:
    return "https://" + normalize_domain(domain)


def seed_host(domain: str) -> str:
    return (urlsplit(seed_url(domain)).hostname or "").lower()


def is_same_site(link: str, domain: str, mode: str = "host") -> bool:
    """
    "host": link is http(s) and its host is the seed host or a subdomain of it.
    "substring": the domain string appears anywhere in the link. Loose; it
    also accepts unrelated hosts that carry the domain in their path or query.
    """
    if mode == "substring":
        return domain in link
    if mode != "host":
        raise ValueError(f"unknown same-site mode {mode!r}")

    try:
        parts = urlsplit(link)
        host = (parts.hostname or "").lower()
    except ValueError:
        return False
    if parts.scheme not in ("http", "https") or not host:
        return False
    expected = seed_host(domain)
    return host == expected or host.endswith("." + expected)
