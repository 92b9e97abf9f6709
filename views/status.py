# views/status.py

from flask import Blueprint, jsonify

status_bp = Blueprint('status', __name__)

HEALTH_MESSAGE = 'OER proxy is running.'


@status_bp.route('/', methods=['GET'])
@status_bp.route('/api/health', methods=['GET'])
def get_status():
    """
    Liveness check used by the front ends before they call the proxy.
    """
    return jsonify({
        'status': 'ok',
        'message': HEALTH_MESSAGE,
    })
