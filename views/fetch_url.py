# views/fetch_url.py

import asyncio
import logging

from flask import Blueprint, jsonify, request

from services.url_text_service import fetch_url_text
from utils.errors import ProxyError, UpstreamError, error_response, proxy_error_response

LOGGER = logging.getLogger(__name__)

fetch_url_bp = Blueprint('fetch_url', __name__)


@fetch_url_bp.route('/api/fetch-url', methods=['GET'])
def fetch_url():
    """외부 URL의 제목과 본문 텍스트를 추출하여 반환합니다."""
    url = request.args.get('url')
    try:
        page = asyncio.run(fetch_url_text(url))
        return jsonify(page.to_dict())
    except UpstreamError as e:
        LOGGER.error("Error fetching URL: %s", e.message)
        return proxy_error_response(e, 'Could not fetch URL: ')
    except ProxyError as e:
        return proxy_error_response(e)
    except Exception:
        LOGGER.exception("Unexpected error fetching URL")
        return error_response(500, 'INTERNAL_ERROR', 'internal error')
