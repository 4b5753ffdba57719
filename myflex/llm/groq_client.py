from __future__ import annotations

import json
import logging
from typing import Any

from groq import Groq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)


def complete(
    system_prompt: str,
    user_content: str | None = None,
    *,
    temperature: float = 0.5,
    json_mode: bool = False,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    context: str = "llm",
) -> str | None:
    """
    Call the Groq chat completion API and return the stripped answer text.

    Returns ``None`` when the LLM is disabled or unconfigured, on any API
    error or timeout, and when the answer is empty.
    """
    if not config.enabled or not config.api_key:
        return None

    messages = [{"role": "system", "content": system_prompt}]
    if user_content:
        messages.append({"role": "user", "content": user_content})

    params: dict[str, Any] = {
        "model": config.model,
        "messages": messages,
        "max_tokens": config.max_tokens,
        "temperature": temperature,
    }
    if json_mode:
        params["response_format"] = {"type": "json_object"}

    try:
        client = Groq(api_key=config.api_key, timeout=config.timeout)
        response = client.chat.completions.create(**params)
        content = (response.choices[0].message.content or "").strip()
    except Exception:
        logger.warning("[%s] Groq LLM call failed", context, exc_info=True)
        return None

    if not content:
        logger.warning("[%s] Groq LLM returned an empty answer", context)
        return None
    return content


def complete_json(
    system_prompt: str,
    user_content: str | None = None,
    *,
    temperature: float = 0.5,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
    context: str = "llm",
) -> dict[str, Any] | None:
    """Like :func:`complete` in JSON mode; returns the decoded object or ``None``."""
    content = complete(
        system_prompt,
        user_content,
        temperature=temperature,
        json_mode=True,
        config=config,
        context=context,
    )
    if content is None:
        return None

    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        logger.warning("[%s] LLM returned invalid JSON: %.200s", context, content)
        return None

    if not isinstance(parsed, dict):
        logger.warning("[%s] LLM returned a JSON %s, expected an object", context, type(parsed).__name__)
        return None
    return parsed
