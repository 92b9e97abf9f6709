"""Text normalization utilities for sorting and keyword matching."""

import re
import unicodedata

_WS_RE = re.compile(r"\s+", re.UNICODE)


def normalize_match_text(value):
    """Lowercase text for case-insensitive substring checks."""
    if value is None:
        return ""
    return str(value).lower()


def title_sort_key(value):
    """Collation key approximating a locale-aware title comparison.

    Accents are folded into their base letters and case is ignored, so
    "Émile" sorts beside "emile" instead of after "z". Titles that compare
    equal keep their discovery order under a stable sort.
    """
    if value is None:
        return ""
    text = unicodedata.normalize("NFKD", str(value).strip())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _WS_RE.sub(" ", text)
    return text.casefold()
