"""Heuristic filter for sandbox, workshop and test books on the network.

Books marked ``inCatalog`` by network staff are always kept, whatever their
slug or title says.
"""

import re

import config
from utils.record import read_field
from utils.text import normalize_match_text

_SCHEME_RE = re.compile(r"^https?://")

JUNK_SLUG_KEYWORDS = (
    "sandbox",
    "sample",
    "test",
    "demo",
    "h5p",
    "hypothesis",
    "import",
    "workshop",
    "template",
    "training",
    "trial",
    "temp",
    "-dev",
    "devsite",
    "dev2",
)
JUNK_TITLE_KEYWORDS = (
    "sandbox",
    "sample",
    "testbook",
    "test book",
    "demo book",
    "workshop",
    "template",
    "dev site",
    "dev 2",
)


def book_slug(link, trusted_domain=None):
    domain = (trusted_domain or config.PRESSBOOKS_TRUSTED_DOMAIN).lower()
    slug = normalize_match_text(link)
    slug = _SCHEME_RE.sub("", slug, count=1)
    slug = slug.replace(f".{domain}/", "", 1)
    return slug.replace("/", "", 1)


def is_junk_book(raw_book, trusted_domain=None):
    meta = read_field(raw_book, "metadata") or {}
    if read_field(meta, "inCatalog") is True:
        return False

    slug = book_slug(read_field(raw_book, "link") or "", trusted_domain)
    title = normalize_match_text(read_field(meta, "name") or "")

    if any(keyword in slug for keyword in JUNK_SLUG_KEYWORDS):
        return True
    if any(keyword in title for keyword in JUNK_TITLE_KEYWORDS):
        return True
    return False
