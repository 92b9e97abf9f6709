# config.py
import json
import os
from urllib.parse import urlparse


TRUTHY_VALUES = {"1", "true", "yes", "y", "on"}


def _is_truthy(value):
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES


def _parse_origins(raw):
    """Parse CORS origins from a comma separated list or a JSON array."""
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except ValueError:
            parsed = None
        if isinstance(parsed, list):
            origins = [str(item).strip() for item in parsed if str(item).strip()]
            return origins or None
    origins = [part.strip() for part in text.split(",") if part.strip()]
    return origins or None


# --- Server ---
PORT = int(os.getenv('PORT', 3001))
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()
MAX_REQUEST_BYTES = int(os.getenv('MAX_REQUEST_BYTES', 2 * 1024 * 1024))

# --- CORS ---
CORS_ALLOW_ORIGINS = _parse_origins(os.getenv('CORS_ALLOW_ORIGINS'))
CORS_SUPPORTS_CREDENTIALS = _is_truthy(os.getenv('CORS_SUPPORTS_CREDENTIALS'))

# --- Claude API ---
ANTHROPIC_API_KEY = os.getenv('ANTHROPIC_API_KEY')
ANTHROPIC_API_URL = os.getenv('ANTHROPIC_API_URL', 'https://api.anthropic.com/v1/messages')
ANTHROPIC_VERSION = os.getenv('ANTHROPIC_VERSION', '2023-06-01')
CLAUDE_DEFAULT_MODEL = os.getenv('CLAUDE_DEFAULT_MODEL', 'claude-opus-4-5')
CLAUDE_LEGACY_MAX_TOKENS = int(os.getenv('CLAUDE_LEGACY_MAX_TOKENS', 4096))
CLAUDE_DEFAULT_MAX_TOKENS = int(os.getenv('CLAUDE_DEFAULT_MAX_TOKENS', 2048))
MAX_PROMPT_LENGTH = int(os.getenv('MAX_PROMPT_LENGTH', 50000))

# --- Pressbooks ---
PRESSBOOKS_NETWORK_URL = os.getenv('PRESSBOOKS_NETWORK_URL', 'https://pressbooks.tru.ca').rstrip('/')
PRESSBOOKS_TRUSTED_DOMAIN = (
    os.getenv('PRESSBOOKS_TRUSTED_DOMAIN') or urlparse(PRESSBOOKS_NETWORK_URL).hostname or ''
).lower()
PRESSBOOKS_BOOKS_PER_PAGE = int(os.getenv('PRESSBOOKS_BOOKS_PER_PAGE', 10))
PRESSBOOKS_FETCH_CONCURRENCY = int(os.getenv('PRESSBOOKS_FETCH_CONCURRENCY', 8))
BOOKS_CACHE_TTL_SECONDS = int(os.getenv('BOOKS_CACHE_TTL_SECONDS', 600))

# --- HTTP Client Defaults ---
UPSTREAM_HEADERS = {
    'Accept': 'application/json',
}
UPSTREAM_HTTP_TOTAL_TIMEOUT_SECONDS = int(os.getenv('UPSTREAM_HTTP_TOTAL_TIMEOUT_SECONDS', 60))
UPSTREAM_HTTP_CONNECT_TIMEOUT_SECONDS = int(os.getenv('UPSTREAM_HTTP_CONNECT_TIMEOUT_SECONDS', 15))

# --- Arbitrary URL fetch ---
FETCH_URL_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (compatible; OERProxyBot/1.0; +https://openpress.tru.ca)',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
}
FETCH_URL_TIMEOUT_SECONDS = float(os.getenv('FETCH_URL_TIMEOUT_SECONDS', 12))
FETCH_URL_MIN_TEXT_LENGTH = int(os.getenv('FETCH_URL_MIN_TEXT_LENGTH', 20))
