"""Fetch an arbitrary external page and extract its title and readable text."""

import asyncio
import logging
import re
from dataclasses import dataclass
from typing import Any, Dict
from urllib.parse import urlparse

import aiohttp

import config
from utils.errors import (
    BlockedHostError,
    NoContentError,
    UnsupportedContentError,
    UpstreamError,
    UpstreamTimeoutError,
    ValidationError,
)
from utils.html_text import count_words, html_to_plain_text
from utils.http import build_timeout, create_session, is_success_status

LOGGER = logging.getLogger(__name__)

# Best-effort guard on the literal hostname; DNS indirection is not resolved.
BLOCKED_HOST_PATTERNS = (
    re.compile(r"^localhost", re.IGNORECASE),
    re.compile(r"^127\."),
    re.compile(r"^10\."),
    re.compile(r"^192\.168\."),
    re.compile(r"^172\.(1[6-9]|2\d|3[01])\."),
)
ALLOWED_CONTENT_TYPES = ("text/html", "text/plain", "application/xhtml")
_TITLE_RE = re.compile(r"<title[^>]*>([^<]*)</title>", re.IGNORECASE)


@dataclass(frozen=True)
class ExternalPageExtract:
    title: str
    text: str
    word_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "text": self.text, "wordCount": self.word_count}


def is_blocked_host(hostname):
    return any(pattern.search(hostname or "") for pattern in BLOCKED_HOST_PATTERNS)


def validate_fetch_url(url):
    """Return the parsed URL or raise before any network traffic."""
    if not url or not str(url).strip():
        raise ValidationError("url query parameter is required.")
    try:
        parsed = urlparse(str(url).strip())
        hostname = parsed.hostname
    except ValueError:
        raise ValidationError("Invalid URL.")

    if not parsed.scheme or not parsed.netloc:
        raise ValidationError("Invalid URL.")
    if parsed.scheme.lower() not in ("http", "https"):
        raise ValidationError("Only http and https URLs are supported.")
    if not hostname:
        raise ValidationError("Invalid URL.")
    if is_blocked_host(hostname):
        raise BlockedHostError("That host is not allowed.")
    return parsed


def extract_title(html, fallback):
    match = _TITLE_RE.search(html or "")
    if match:
        return match.group(1).strip()
    return fallback


def _check_content_type(content_type):
    if not any(allowed in content_type for allowed in ALLOWED_CONTENT_TYPES):
        media_type = content_type.split(";")[0].strip()
        raise UnsupportedContentError(f"Unsupported content type: {media_type}")


async def _download(session, url):
    try:
        async with session.get(url, headers=config.FETCH_URL_HEADERS) as response:
            if not is_success_status(response.status):
                raise UpstreamError(
                    f"Remote server returned HTTP {response.status}",
                    upstream_status=response.status,
                )
            _check_content_type(response.headers.get("Content-Type") or "")
            return await response.text(errors="replace")
    except asyncio.TimeoutError:
        raise
    except aiohttp.ClientError as e:
        raise UpstreamError(str(e) or type(e).__name__) from e


async def _download_with_timeout(session, url):
    try:
        return await asyncio.wait_for(_download(session, url), timeout=config.FETCH_URL_TIMEOUT_SECONDS)
    except asyncio.TimeoutError as e:
        LOGGER.warning("Timed out after %ss fetching %s", config.FETCH_URL_TIMEOUT_SECONDS, url)
        raise UpstreamTimeoutError("Request timed out. The URL took too long to respond.") from e


async def fetch_url_text(url, session=None):
    parsed = validate_fetch_url(url)
    target = parsed.geturl()
    LOGGER.info("Fetching URL: %s", target)

    if session is None:
        timeout = build_timeout(total=config.FETCH_URL_TIMEOUT_SECONDS, connect=config.FETCH_URL_TIMEOUT_SECONDS)
        async with create_session(timeout=timeout, limit=1) as own_session:
            html = await _download_with_timeout(own_session, target)
    else:
        html = await _download_with_timeout(session, target)

    title = extract_title(html, parsed.hostname)
    text = html_to_plain_text(html)
    if len(text) < config.FETCH_URL_MIN_TEXT_LENGTH:
        raise NoContentError("No readable text found at that URL.")

    word_count = count_words(text)
    LOGGER.info('Fetched "%s" (%d words)', title, word_count)
    return ExternalPageExtract(title=title, text=text, word_count=word_count)
