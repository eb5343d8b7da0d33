"""Gemini client for plain-language script explanations.

Sends a generated script to the Gemini generateContent REST endpoint and
returns the model's markdown explanation. The explanation is informational
only; nothing in wingetgen depends on its content.

Configuration:
    The API key is taken from the api_key argument or, failing that, from
    the GEMINI_API_KEY environment variable (optionally loaded from .env).

Example:
    from wingetgen.explain import request_explanation

    text = request_explanation(script, model="gemini-2.5-flash")
"""

from __future__ import annotations

import os
from typing import Any

from dotenv import find_dotenv, load_dotenv
import requests

from wingetgen.exceptions import ConfigError, NetworkError

API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"
API_KEY_ENV_VAR = "GEMINI_API_KEY"

PROMPT_TEMPLATE = """\
You are reviewing a PowerShell script that an RMM agent (Tactical RMM) runs \
as SYSTEM to silently update applications with winget.

Explain to an IT technician what the script does, step by step, and point \
out the options it was generated with (exclusions, self-update, \
--include-unknown, --force). Use short markdown: "# " and "## " headings, \
"- " bullet lists and **bold** for emphasis. Separate blocks with a blank line.

```powershell
{script}
```
"""


def _env_api_key() -> str | None:
    # .env is looked up from the working directory, not the install location
    load_dotenv(find_dotenv(usecwd=True))
    return os.environ.get(API_KEY_ENV_VAR)


def build_request_body(script: str) -> dict[str, Any]:
    """Build the generateContent JSON body for a script."""
    return {
        "contents": [
            {"parts": [{"text": PROMPT_TEMPLATE.format(script=script)}]},
        ]
    }


def _extract_text(payload: Any) -> str:
    """Pull the explanation text out of a generateContent response."""
    try:
        parts = payload["candidates"][0]["content"]["parts"]
        text = "".join(part.get("text", "") for part in parts)
    except (KeyError, IndexError, TypeError, AttributeError) as err:
        raise NetworkError(
            "Gemini response did not contain an explanation"
        ) from err

    if not text.strip():
        raise NetworkError("Gemini returned an empty explanation")
    return text


def request_explanation(
    script: str,
    api_key: str | None = None,
    model: str = DEFAULT_MODEL,
    timeout: int = 60,
) -> str:
    """Ask Gemini to explain a generated script.

    Args:
        script: Generated PowerShell script text.
        api_key: Gemini API key. Defaults to $GEMINI_API_KEY.
        model: Gemini model name.
        timeout: Request timeout in seconds.

    Returns:
        Markdown explanation text.

    Raises:
        ConfigError: If no API key is available.
        NetworkError: If the request fails or the response has no text.
    """
    from wingetgen.logging import get_global_logger

    logger = get_global_logger()

    api_key = api_key or _env_api_key()
    if not api_key:
        raise ConfigError(
            f"No Gemini API key. Set {API_KEY_ENV_VAR} or pass --api-key."
        )

    url = f"{API_BASE_URL}/models/{model}:generateContent"
    headers = {
        "Content-Type": "application/json",
        "x-goog-api-key": api_key,
    }

    logger.verbose("EXPLAIN", f"Requesting explanation from: {model}")
    logger.debug("EXPLAIN", f"POST {url} ({len(script)} characters of script)")

    try:
        response = requests.post(
            url, headers=headers, json=build_request_body(script), timeout=timeout
        )
        response.raise_for_status()
    except requests.exceptions.HTTPError as err:
        if response.status_code in (401, 403):
            raise NetworkError(
                f"Gemini API rejected the API key. Status: {response.status_code}"
            ) from err
        elif response.status_code == 429:
            raise NetworkError(
                "Gemini API rate limit exceeded. Try again later."
            ) from err
        else:
            raise NetworkError(
                f"Gemini API request failed: {response.status_code} "
                f"{response.reason}"
            ) from err
    except requests.exceptions.RequestException as err:
        raise NetworkError(f"Failed to reach Gemini API: {err}") from err

    try:
        payload = response.json()
    except ValueError as err:
        raise NetworkError("Gemini API returned invalid JSON") from err

    text = _extract_text(payload)
    logger.verbose("EXPLAIN", f"[OK] Received explanation ({len(text)} characters)")
    return text
