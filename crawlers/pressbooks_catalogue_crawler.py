import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

import config
from services.catalogue_cache import books_cache
from services.junk_filter import is_junk_book
from services.pressbooks_parser import CatalogueEntry, parse_book
from utils.errors import UpstreamError
from utils.http import create_session, is_success_status
from utils.text import title_sort_key

LOGGER = logging.getLogger(__name__)


class PressbooksCatalogueCrawler:
    """Aggregates the paginated Pressbooks network book listing.

    Page 1 is fetched first to learn the page count from ``X-WP-TotalPages``;
    the remaining pages are then fetched concurrently. Any failed page aborts
    the whole listing and cancels the pages still in flight.
    """

    DISPLAY_NAME = "Pressbooks network"
    BOOKS_PATH = "/wp-json/pressbooks/v2/books"
    TOTAL_PAGES_HEADER = "X-WP-TotalPages"

    def __init__(self, network_url=None, per_page=None, concurrency=None, cache=None):
        self.network_url = (network_url or config.PRESSBOOKS_NETWORK_URL).rstrip("/")
        self.per_page = per_page or config.PRESSBOOKS_BOOKS_PER_PAGE
        self.concurrency = max(1, concurrency or config.PRESSBOOKS_FETCH_CONCURRENCY)
        self.cache = books_cache if cache is None else cache

    def _page_url(self, page: int) -> str:
        return f"{self.network_url}{self.BOOKS_PATH}?per_page={self.per_page}&page={page}"

    @staticmethod
    def _parse_total_pages(raw: Optional[str]) -> int:
        try:
            parsed = int(str(raw).strip())
        except (TypeError, ValueError):
            return 1
        return parsed if parsed >= 1 else 1

    async def _fetch_page(self, session, page: int) -> Tuple[List[Dict[str, Any]], Any]:
        url = self._page_url(page)
        try:
            async with session.get(url, headers=config.UPSTREAM_HEADERS) as response:
                if not is_success_status(response.status):
                    raise UpstreamError(
                        f"Pressbooks returned HTTP {response.status} on page {page}",
                        upstream_status=response.status,
                        page=page,
                    )
                try:
                    data = await response.json(content_type=None)
                except ValueError as e:
                    raise UpstreamError(f"Invalid JSON from Pressbooks on page {page}", page=page) from e
                return (data if isinstance(data, list) else []), response.headers
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(
                f"Could not reach Pressbooks on page {page}: {e or type(e).__name__}",
                page=page,
            ) from e

    async def _fetch_remaining_pages(self, session, total_pages: int) -> Dict[int, List[Dict[str, Any]]]:
        if total_pages < 2:
            return {}

        semaphore = asyncio.Semaphore(self.concurrency)

        async def fetch(page):
            async with semaphore:
                books, _ = await self._fetch_page(session, page)
                return page, books

        tasks = [asyncio.ensure_future(fetch(page)) for page in range(2, total_pages + 1)]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

        failures = [task.exception() for task in done if not task.cancelled() and task.exception() is not None]
        if failures:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise min(failures, key=lambda exc: getattr(exc, "page", None) or 0)

        return dict(task.result() for task in done)

    async def fetch_raw_books(self, session) -> List[Dict[str, Any]]:
        """Fetch every page and flatten the raw records in page order."""
        first_page, headers = await self._fetch_page(session, 1)
        if not first_page:
            LOGGER.info("%s page 1 is empty; nothing more to fetch", self.DISPLAY_NAME)
            return []

        total_pages = self._parse_total_pages(headers.get(self.TOTAL_PAGES_HEADER) if headers else None)
        remaining = await self._fetch_remaining_pages(session, total_pages)

        raw_books = list(first_page)
        for page in range(2, total_pages + 1):
            books = remaining.get(page)
            if not books:
                # TODO: report early empty pages to the caller once the tools can show partial listings.
                LOGGER.warning(
                    "%s page %d of %d is empty; treating it as the end of the listing",
                    self.DISPLAY_NAME,
                    page,
                    total_pages,
                )
                break
            raw_books.extend(books)

        LOGGER.info("Fetched %d raw books from %d page(s)", len(raw_books), total_pages)
        return raw_books

    def build_entries(self, raw_books: List[Dict[str, Any]], include_all: bool) -> List[CatalogueEntry]:
        if not include_all:
            raw_books = [book for book in raw_books if not is_junk_book(book)]
        entries = [parse_book(book) for book in raw_books if isinstance(book, dict)]
        entries.sort(key=lambda entry: title_sort_key(entry.title))
        return entries

    async def list_books(self, include_all: bool = False, session=None) -> List[CatalogueEntry]:
        if not include_all:
            cached = self.cache.get()
            if cached is not None:
                LOGGER.info("Serving %d books from cache", len(cached))
                return cached

        LOGGER.info(
            "Fetching book list from %s%s",
            self.DISPLAY_NAME,
            " (unfiltered)" if include_all else "",
        )
        if session is None:
            async with create_session(limit=self.concurrency) as own_session:
                raw_books = await self.fetch_raw_books(own_session)
        else:
            raw_books = await self.fetch_raw_books(session)

        entries = self.build_entries(raw_books, include_all)
        if not include_all:
            self.cache.store(entries)

        LOGGER.info("Returning %d books (of %d fetched)", len(entries), len(raw_books))
        return entries


def fetch_book_list(include_all=False):
    """Synchronous entry point for the Flask views."""
    return asyncio.run(PressbooksCatalogueCrawler().list_books(include_all=include_all))
