# influencer_iq/tools/groq_client.py
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout

import requests

from influencer_iq.tools.logger import make_logger

log = make_logger("groq")


class UpstreamError(Exception):
    """The completion API answered, but not with a usable completion."""

    def __init__(self, message: str, status: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status = status
        self.body = body


def groq_chat(
    base_url: str,
    api_key: str | None,
    model: str,
    system: str,
    user: str,
    temperature: float = 0.5,
    force_json: bool = False,
    timeout_sec: float = 30,        # total wall-clock budget per attempt
    max_tokens: int = 1500,
) -> dict:
    """
    One chat-completion request against an OpenAI-compatible endpoint.

    The whole exchange (connect, headers and body) must finish within
    timeout_sec; a slow-dripping body raises requests.exceptions.Timeout once
    the deadline passes, the same as a stalled connection.

    Returns the decoded response body. Raises UpstreamError on a non-2xx status
    or an undecodable body; transport errors (timeouts, refused connections)
    propagate as requests exceptions.
    """
    url = f"{base_url.rstrip('/')}/chat/completions"
    headers = {"Content-Type": "application/json"}
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": system},
            {"role": "user", "content": user},
        ],
        "temperature": float(temperature),
        "max_tokens": int(max_tokens),
    }
    if force_json:
        payload["response_format"] = {"type": "json_object"}

    log.debug(f"POST {url} model={model} force_json={force_json} prompt_chars={len(user)}")
    # requests' timeout only bounds each socket wait, so the deadline lives here
    executor = ThreadPoolExecutor(max_workers=1)
    future = executor.submit(requests.post, url, json=payload, headers=headers, timeout=timeout_sec)
    try:
        r = future.result(timeout=timeout_sec)
    except FuturesTimeout:
        future.cancel()
        raise requests.exceptions.Timeout(
            f"No complete response from {model} within {timeout_sec}s"
        ) from None
    finally:
        # Don't wait on an abandoned request; its own socket timeout ends it
        executor.shutdown(wait=False)

    if not r.ok:
        raise UpstreamError(
            f"HTTP {r.status_code} {r.reason or ''}".strip(),
            status=r.status_code,
            body=r.text[:500],
        )

    try:
        return r.json()
    except ValueError as e:
        raise UpstreamError(f"Invalid JSON body: {e}", status=r.status_code, body=r.text[:500]) from e


def completion_text(resp_json: dict) -> str:
    """Pull choices[0].message.content out of a completion body."""
    try:
        content = resp_json["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        keys = list(resp_json.keys()) if isinstance(resp_json, dict) else type(resp_json).__name__
        raise UpstreamError(f"Completion has no message content (keys: {keys})")
    if not isinstance(content, str) or not content.strip():
        raise UpstreamError("Completion returned empty content")
    return content
