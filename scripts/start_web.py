import os
import sys

from dotenv import load_dotenv


DEFAULT_PORT = "3001"
ENDPOINTS = (
    ("Claude endpoint", "POST", "/api/generate"),
    ("Books endpoint", "GET ", "/api/books"),
    ("TOC endpoint", "GET ", "/api/toc?bookUrl=..."),
    ("Chapter endpoint", "GET ", "/api/chapter?bookUrl=...&chapterId=..."),
    ("Fetch URL endpoint", "GET ", "/api/fetch-url?url=..."),
)


def require_api_key():
    """Return the Claude API key or exit before the server starts."""
    api_key = (os.getenv("ANTHROPIC_API_KEY") or "").strip()
    if not api_key:
        print("\n  ERROR: ANTHROPIC_API_KEY environment variable is not set.", file=sys.stderr)
        print("  Run: export ANTHROPIC_API_KEY=sk-ant-your-key-here\n", file=sys.stderr)
        sys.exit(1)
    return api_key


def mask_api_key(api_key):
    return f"{api_key[:12]}…"


def print_banner(port, api_key):
    print("\n  OER Proxy Server")
    print(f"  Listening at http://localhost:{port}")
    for label, method, path in ENDPOINTS:
        print(f"  {(label + ':'):<21} {method} http://localhost:{port}{path}")
    print(f"  API key: {mask_api_key(api_key)}\n")


def build_gunicorn_command():
    """Build the gunicorn argv.

    One worker by default: the book list cache lives in process memory, so
    each extra worker keeps its own copy and refreshes it independently.
    """
    port = (os.getenv("PORT") or DEFAULT_PORT).strip()
    bind = (os.getenv("GUNICORN_BIND") or f"0.0.0.0:{port}").strip()
    workers = (os.getenv("WEB_CONCURRENCY") or "1").strip()
    threads = (os.getenv("GUNICORN_THREADS") or "4").strip()
    timeout = (os.getenv("GUNICORN_TIMEOUT") or "120").strip()

    return [
        "gunicorn",
        "app:app",
        "--bind",
        bind,
        "--workers",
        workers,
        "--threads",
        threads,
        "--timeout",
        timeout,
    ]


def main():
    load_dotenv()
    api_key = require_api_key()

    command = build_gunicorn_command()
    print_banner((os.getenv("PORT") or DEFAULT_PORT).strip(), api_key)
    print("[startup] Starting web server:", " ".join(command))
    os.execvp(command[0], command)


if __name__ == "__main__":
    main()
