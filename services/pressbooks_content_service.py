"""Table-of-contents and chapter retrieval from books on the trusted network."""

import asyncio
import logging
import re
from urllib.parse import urlparse

import aiohttp

import config
from services.pressbooks_parser import parse_chapter, parse_toc
from utils.errors import UpstreamError, ValidationError
from utils.http import create_session, is_success_status

LOGGER = logging.getLogger(__name__)

TOC_PATH = "/wp-json/pressbooks/v2/toc"
CHAPTER_PATH = "/wp-json/pressbooks/v2/chapters/{chapter_id}"
_CHAPTER_ID_RE = re.compile(r"^\d+$")


def is_trusted_host(hostname, trusted_domain=None):
    if not hostname:
        return False
    domain = (trusted_domain or config.PRESSBOOKS_TRUSTED_DOMAIN).lower()
    host = hostname.lower().rstrip(".")
    return host == domain or host.endswith(f".{domain}")


def validate_book_url(book_url, trusted_domain=None):
    """Return the normalized book URL, or raise ValidationError before any fetch."""
    if not book_url or not str(book_url).strip():
        raise ValidationError("bookUrl query parameter is required.")

    book_url = str(book_url).strip()
    try:
        parsed = urlparse(book_url)
        hostname = parsed.hostname
    except ValueError:
        raise ValidationError("bookUrl is not a valid URL.")

    if parsed.scheme not in ("http", "https") or not hostname:
        raise ValidationError("bookUrl is not a valid URL.")

    domain = trusted_domain or config.PRESSBOOKS_TRUSTED_DOMAIN
    if not is_trusted_host(hostname, domain):
        raise ValidationError(f"bookUrl must be a {domain} subdomain.")

    return book_url.rstrip("/")


def validate_chapter_id(chapter_id):
    value = str(chapter_id or "").strip()
    if not value:
        raise ValidationError("bookUrl and chapterId query parameters are required.")
    if not _CHAPTER_ID_RE.match(value):
        raise ValidationError("chapterId must be a numeric chapter ID.")
    return value


async def _get_json(session, url):
    try:
        async with session.get(url, headers=config.UPSTREAM_HEADERS) as response:
            if not is_success_status(response.status):
                raise UpstreamError(f"HTTP {response.status}", upstream_status=response.status)
            try:
                return await response.json(content_type=None)
            except ValueError as e:
                raise UpstreamError("Invalid JSON response") from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise UpstreamError(str(e) or type(e).__name__) from e


async def _fetch_json(url, session=None):
    if session is not None:
        return await _get_json(session, url)
    async with create_session(limit=1) as own_session:
        return await _get_json(own_session, url)


async def get_toc(book_url, session=None):
    base_url = validate_book_url(book_url)
    toc_url = f"{base_url}{TOC_PATH}"
    LOGGER.info("Fetching TOC: %s", toc_url)
    raw_toc = await _fetch_json(toc_url, session)
    return parse_toc(raw_toc)


async def get_chapter(book_url, chapter_id, session=None):
    if not book_url:
        raise ValidationError("bookUrl and chapterId query parameters are required.")
    base_url = validate_book_url(book_url)
    chapter_id = validate_chapter_id(chapter_id)

    chapter_url = f"{base_url}{CHAPTER_PATH.format(chapter_id=chapter_id)}"
    LOGGER.info("Fetching chapter: %s", chapter_url)
    raw_chapter = await _fetch_json(chapter_url, session)
    return parse_chapter(raw_chapter)
