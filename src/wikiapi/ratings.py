from __future__ import annotations

import re
from typing import Callable

RatingExtractor = Callable[[str], "str | None"]

_CLASS_ALIASES = {
    "featured": "fa",
    "featuredlist": "fl",
    "good": "ga",
    "dab": "disambig",
    "disambiguation": "disambig",
    "n/a": "na",
}

_CLASS_PARAM_RE = re.compile(r"\|\s*class\s*=\s*([^|}\n]*)", re.IGNORECASE)
_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)


def normalize_class(value: str) -> str | None:
    normalized = "".join(value.split()).lower()
    if not normalized:
        return None
    return _CLASS_ALIASES.get(normalized, normalized)


def extract_rating(wikitext: str | None) -> str | None:
    """Return the first assessment class set on a talk page's project banners.

    ``{{WikiProject Food|class=GA}}`` yields ``"ga"``. Banners without a
    ``class`` parameter, or with an empty one, are skipped; ``None`` means no
    banner on the page carries a rating.
    """
    if not wikitext:
        return None

    text = _COMMENT_RE.sub("", wikitext)
    for match in _CLASS_PARAM_RE.finditer(text):
        rating = normalize_class(match.group(1))
        if rating is not None:
            return rating
    return None
