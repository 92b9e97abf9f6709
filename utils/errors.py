"""Error taxonomy shared by the proxy services and views."""

from flask import jsonify


class ProxyError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message, code=None, status_code=None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ProxyError):
    status_code = 400
    code = "INVALID_INPUT"


class BlockedHostError(ProxyError):
    status_code = 400
    code = "HOST_NOT_ALLOWED"


class UnsupportedContentError(ProxyError):
    status_code = 415
    code = "UNSUPPORTED_CONTENT_TYPE"


class NoContentError(ProxyError):
    status_code = 422
    code = "NO_READABLE_TEXT"


class UpstreamError(ProxyError):
    status_code = 502
    code = "UPSTREAM_ERROR"

    def __init__(self, message, upstream_status=None, page=None, status_code=None):
        super().__init__(message, status_code=status_code)
        self.upstream_status = upstream_status
        self.page = page


class UpstreamTimeoutError(ProxyError):
    status_code = 504
    code = "UPSTREAM_TIMEOUT"


class ConfigError(Exception):
    def __init__(self, code="API_KEY_MISSING", message="ANTHROPIC_API_KEY is not configured."):
        super().__init__(message)
        self.code = code
        self.message = message


def error_response(status_code: int, code: str, message: str):
    return jsonify({'error': message, 'code': code}), status_code


def proxy_error_response(error: ProxyError, prefix: str = ''):
    message = f"{prefix}{error.message}" if prefix else error.message
    return error_response(error.status_code, error.code, message)
