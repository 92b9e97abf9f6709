# views/books.py

import asyncio
import logging

from flask import Blueprint, jsonify, request

from crawlers.pressbooks_catalogue_crawler import fetch_book_list
from services.pressbooks_content_service import get_chapter, get_toc
from utils.errors import ProxyError, error_response, proxy_error_response

LOGGER = logging.getLogger(__name__)

books_bp = Blueprint('books', __name__)


@books_bp.route('/api/books', methods=['GET'])
def list_books():
    """네트워크 전체 도서 목록을 제목순으로 반환합니다. ?all=1 이면 필터와 캐시를 건너뜁니다."""
    include_all = request.args.get('all') == '1'
    try:
        books = fetch_book_list(include_all=include_all)
        return jsonify([book.to_dict() for book in books])
    except ProxyError as e:
        LOGGER.error("Error fetching books: %s", e.message)
        return proxy_error_response(e, 'Could not fetch book list: ')
    except Exception:
        LOGGER.exception("Unexpected error fetching books")
        return error_response(500, 'INTERNAL_ERROR', 'internal error')


@books_bp.route('/api/toc', methods=['GET'])
def book_toc():
    book_url = request.args.get('bookUrl')
    try:
        parts = asyncio.run(get_toc(book_url))
        return jsonify([part.to_dict() for part in parts])
    except ProxyError as e:
        if e.status_code >= 500:
            LOGGER.error("Error fetching TOC: %s", e.message)
            return proxy_error_response(e, 'Could not fetch table of contents: ')
        return proxy_error_response(e)
    except Exception:
        LOGGER.exception("Unexpected error fetching TOC")
        return error_response(500, 'INTERNAL_ERROR', 'internal error')


@books_bp.route('/api/chapter', methods=['GET'])
def book_chapter():
    book_url = request.args.get('bookUrl')
    chapter_id = request.args.get('chapterId')
    try:
        chapter = asyncio.run(get_chapter(book_url, chapter_id))
        return jsonify(chapter.to_dict())
    except ProxyError as e:
        if e.status_code >= 500:
            LOGGER.error("Error fetching chapter: %s", e.message)
            return proxy_error_response(e, 'Could not fetch chapter: ')
        return proxy_error_response(e)
    except Exception:
        LOGGER.exception("Unexpected error fetching chapter")
        return error_response(500, 'INTERNAL_ERROR', 'internal error')
