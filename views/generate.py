# views/generate.py

import asyncio
import logging

from flask import Blueprint, jsonify, request

from services.claude_proxy_service import build_claude_payload, forward_to_claude
from utils.errors import ConfigError, ProxyError, error_response, proxy_error_response

LOGGER = logging.getLogger(__name__)

generate_bp = Blueprint('generate', __name__)


@generate_bp.route('/api/generate', methods=['GET'])
def generate_wrong_method():
    return error_response(405, 'METHOD_NOT_ALLOWED', 'This endpoint only accepts POST requests.')


@generate_bp.route('/api/generate', methods=['POST'])
def generate():
    data = request.get_json(silent=True) or {}
    try:
        payload = build_claude_payload(data)
        body = asyncio.run(forward_to_claude(payload))
        return jsonify(body)
    except ProxyError as e:
        return proxy_error_response(e)
    except ConfigError as e:
        return error_response(503, e.code, e.message)
    except Exception:
        LOGGER.exception("Unexpected error forwarding to Claude")
        return error_response(500, 'INTERNAL_ERROR', 'internal error')
