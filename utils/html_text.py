"""HTML to plain text conversion for chapter bodies and fetched pages.

The steps run in a fixed order: block tags become newlines before the
generic tag strip, and entities are decoded only after every tag is gone.
Only the entities listed in ``_ENTITIES`` are decoded; anything else is left
as written.
"""

import re

_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_BLOCK_TAG_RE = re.compile(r"</?(p|div|h[1-6]|li|blockquote|tr|br)[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_HORIZONTAL_WS_RE = re.compile(r"[ \t]{2,}")
_WS_RE = re.compile(r"\s+")

_ENTITIES = (
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#039;", "'"),
    ("&nbsp;", " "),
    ("&#8211;", "–"),
    ("&#8212;", "—"),
    ("&#8216;", "‘"),
    ("&#8217;", "’"),
    ("&#8220;", "“"),
    ("&#8221;", "”"),
)

_TITLE_ENTITIES = (
    ("&amp;", "&"),
    ("&#8211;", "–"),
)


def _decode(text, entities):
    for entity, replacement in entities:
        text = text.replace(entity, replacement)
    return text


def html_to_plain_text(html):
    """Convert raw HTML into normalized plain text."""
    if not html:
        return ""
    text = _SCRIPT_RE.sub("", html)
    text = _STYLE_RE.sub("", text)
    text = _BLOCK_TAG_RE.sub("\n", text)
    text = _TAG_RE.sub("", text)
    text = _decode(text, _ENTITIES)
    text = _EXCESS_NEWLINES_RE.sub("\n\n", text)
    text = _HORIZONTAL_WS_RE.sub(" ", text)
    return text.strip()


def strip_html(html):
    """Strip tags from a short fragment such as a rendered title."""
    if not html:
        return ""
    text = _TAG_RE.sub("", html)
    return _decode(text, _TITLE_ENTITIES).strip()


def count_words(text):
    if not text:
        return 0
    return len([token for token in _WS_RE.split(text) if token])
