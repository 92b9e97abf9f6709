"""Forward generation requests to the Claude Messages API with the server key."""

import asyncio
import logging

import aiohttp

import config
from utils.errors import ConfigError, UpstreamError, ValidationError
from utils.http import build_timeout, create_session, is_success_status

LOGGER = logging.getLogger(__name__)


def build_claude_payload(body):
    """Accept a legacy ``{prompt}`` body or a modern ``{messages, ...}`` body."""
    if not isinstance(body, dict):
        body = {}

    prompt = body.get("prompt")
    if prompt and isinstance(prompt, str):
        if len(prompt) > config.MAX_PROMPT_LENGTH:
            raise ValidationError("Prompt exceeds maximum length. Shorten your OER content.")
        return {
            "model": config.CLAUDE_DEFAULT_MODEL,
            "max_tokens": config.CLAUDE_LEGACY_MAX_TOKENS,
            "system": "",
            "messages": [{"role": "user", "content": prompt}],
        }

    messages = body.get("messages")
    if not isinstance(messages, list) or not messages:
        raise ValidationError("Request body must contain a messages array or a prompt string.")

    return {
        "model": body.get("model") or config.CLAUDE_DEFAULT_MODEL,
        "max_tokens": body.get("max_tokens") or config.CLAUDE_DEFAULT_MAX_TOKENS,
        "system": body.get("system") or "",
        "messages": messages,
    }


def _build_headers():
    if not config.ANTHROPIC_API_KEY:
        raise ConfigError()
    return {
        "Content-Type": "application/json",
        "x-api-key": config.ANTHROPIC_API_KEY,
        "anthropic-version": config.ANTHROPIC_VERSION,
    }


async def _post(session, payload):
    try:
        async with session.post(config.ANTHROPIC_API_URL, json=payload, headers=_build_headers()) as response:
            try:
                body = await response.json(content_type=None)
            except ValueError:
                body = {}
            status = response.status
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        LOGGER.error("Network error reaching Claude API: %s", e)
        raise UpstreamError(f"Could not reach Claude API: {e or type(e).__name__}") from e

    if not is_success_status(status):
        error = body.get("error") if isinstance(body, dict) else None
        message = error.get("message") if isinstance(error, dict) else None
        LOGGER.error("Claude API error %s: %s", status, body)
        raise UpstreamError(
            message or f"Claude API returned HTTP {status}",
            upstream_status=status,
            status_code=status,
        )
    return body


async def forward_to_claude(payload, session=None):
    LOGGER.info("Claude request, model: %s", payload.get("model"))
    if session is None:
        async with create_session(timeout=build_timeout(), limit=1) as own_session:
            body = await _post(own_session, payload)
    else:
        body = await _post(session, payload)

    usage = body.get("usage") if isinstance(body, dict) else None
    output_tokens = usage.get("output_tokens") if isinstance(usage, dict) else None
    LOGGER.info("Claude responded (%s tokens)", "?" if output_tokens is None else output_tokens)
    return body
