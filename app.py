import logging

from flask import Flask
from flask_cors import CORS
from dotenv import load_dotenv

load_dotenv()

import config
from utils.errors import error_response
from views.books import books_bp
from views.fetch_url import fetch_url_bp
from views.generate import generate_bp
from views.status import status_bp

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = Flask(__name__)
app.config["MAX_CONTENT_LENGTH"] = config.MAX_REQUEST_BYTES

if config.CORS_ALLOW_ORIGINS:
    CORS(
        app,
        origins=config.CORS_ALLOW_ORIGINS,
        supports_credentials=config.CORS_SUPPORTS_CREDENTIALS,
    )
else:
    CORS(app, origins="*")

app.register_blueprint(status_bp)
app.register_blueprint(generate_bp)
app.register_blueprint(books_bp)
app.register_blueprint(fetch_url_bp)


@app.errorhandler(413)
def request_too_large(_error):
    return error_response(413, 'REQUEST_TOO_LARGE', 'Request body is too large.')


@app.errorhandler(404)
def not_found(_error):
    return error_response(404, 'NOT_FOUND', 'Not found.')


if __name__ == "__main__":
    from scripts.start_web import print_banner, require_api_key

    api_key = require_api_key()
    print_banner(config.PORT, api_key)
    app.run(host="0.0.0.0", port=config.PORT)
