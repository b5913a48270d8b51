"""
Shared Gemini helper for the generation pipeline.

Used by:
  - section_filler.generate_section_items   (bulk fill)
  - section_filler.generate_revision        (single-question revision)

One HTTP POST per attempt to the generateContent endpoint. Every failure
(non-2xx status, transport error, malformed body) is retried after the next
delay in RETRY_DELAYS; once the delays are used up the last error is raised
unchanged.

Model: gemini-2.5-flash-preview-09-2025  (override with GEMINI_MODEL env var)
"""

import asyncio
import logging
import os
from typing import Awaitable, Callable, Optional, Sequence

import httpx

log = logging.getLogger("generation.pipeline")

# ── Model config ───────────────────────────────────────────────────────────────
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-preview-09-2025")
GEMINI_API_BASE = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
GEMINI_TIMEOUT = float(os.getenv("GEMINI_TIMEOUT", "60"))

# Seconds to wait after each failed attempt: 1 initial try + 3 retries
RETRY_DELAYS = (1.0, 2.0, 4.0)


class MalformedBodyError(ValueError):
    """The service answered 2xx but without a candidate text."""


def _get_api_key() -> str:
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise RuntimeError(
            "GEMINI_API_KEY is not set. Add it to your .env file."
        )
    return api_key


def _endpoint() -> str:
    return f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"


def _extract_text(payload) -> str:
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedBodyError(f"No candidate text in response: {e!r}")
    if not isinstance(text, str):
        raise MalformedBodyError("Candidate text is not a string")
    return text


async def _post_once(client: httpx.AsyncClient, prompt: str, api_key: str) -> str:
    response = await client.post(
        _endpoint(),
        params={"key": api_key},
        headers={"Content-Type": "application/json"},
        json={"contents": [{"parts": [{"text": prompt}]}]},
    )
    response.raise_for_status()
    try:
        payload = response.json()
    except ValueError as e:
        raise MalformedBodyError(f"Response body is not JSON: {e}")
    return _extract_text(payload)


async def call_gemini(
    prompt: str,
    client: Optional[httpx.AsyncClient] = None,
    delays: Sequence[float] = RETRY_DELAYS,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> str:
    """
    Send one prompt and return the model's reply text.

    Args:
        prompt: Full prompt text
        client: Optional shared httpx client (tests pass one with a mock transport)
        delays: Wait before each retry; len(delays) + 1 attempts in total
        sleep:  Awaitable used for the waits

    Returns:
        Raw candidate text, exactly as the service returned it

    Raises:
        httpx.HTTPError or MalformedBodyError from the final attempt
    """
    api_key = _get_api_key()
    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=GEMINI_TIMEOUT)

    pending = list(delays)
    attempt = 0
    try:
        while True:
            attempt += 1
            try:
                log.info(f"[GEMINI] attempt {attempt} (prompt length: {len(prompt)} chars)")
                text = await _post_once(client, prompt, api_key)
                log.info(f"[GEMINI] success (response length: {len(text)} chars)")
                return text
            except (httpx.HTTPError, MalformedBodyError) as e:
                if not pending:
                    log.error(f"[GEMINI] giving up after {attempt} attempts: {e}")
                    raise
                delay = pending.pop(0)
                log.warning(f"[GEMINI] attempt {attempt} failed ({e}); retrying in {delay:g}s")
                await sleep(delay)
    finally:
        if owns_client:
            await client.aclose()
