from __future__ import annotations

import re
from typing import Iterable, Optional, Pattern, Tuple

# Ordered; the first match wins. Matching is a case-sensitive search anywhere
# in the URL, not a full-string match.
DEFAULT_PRODUCT_PATTERNS: Tuple[str, ...] = (
    r"/product/",
    r"/products/",
    r"/productpage",
    r"/item/",
    r"/p/",
    r"/pl/",
    r"/buy",
    r"/dp/",
    r"-p-\d+",
    r"-p\d+",
    r"/catalog/product/view/",
)


class PatternSet:
    """
    Immutable ordered set of regexes that define a "product URL".
    Built once per engine and shared read-only by every task.
    """

    __slots__ = ("_patterns",)

    def __init__(self, patterns: Optional[Iterable[str]] = None) -> None:
        sources = DEFAULT_PRODUCT_PATTERNS if patterns is None else tuple(patterns)
        self._patterns: Tuple[Pattern[str], ...] = tuple(re.compile(p) for p in sources)

    def is_product_url(self, url: str) -> bool:
        for pattern in self._patterns:
            if pattern.search(url):
                return True
        return False

    def __len__(self) -> int:
        return len(self._patterns)
