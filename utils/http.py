"""aiohttp session helpers shared by the upstream clients."""

import aiohttp

import config


def build_timeout(total=None, connect=None):
    return aiohttp.ClientTimeout(
        total=config.UPSTREAM_HTTP_TOTAL_TIMEOUT_SECONDS if total is None else total,
        connect=config.UPSTREAM_HTTP_CONNECT_TIMEOUT_SECONDS if connect is None else connect,
    )


def create_session(timeout=None, limit=None):
    """Create a ClientSession; must be called from inside a running event loop."""
    connector = aiohttp.TCPConnector(
        limit=limit or config.PRESSBOOKS_FETCH_CONCURRENCY,
        ttl_dns_cache=300,
    )
    return aiohttp.ClientSession(timeout=timeout or build_timeout(), connector=connector)


def is_success_status(status):
    return 200 <= int(status) < 300
