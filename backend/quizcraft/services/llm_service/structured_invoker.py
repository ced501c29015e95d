"""Model invocation and JSON recovery from free-text replies.

The model is never trusted to emit clean JSON. Replies go through:
- reasoning-tag removal
- fenced-block narrowing (when the reply contains a ``` fence)
- greedy bracket extraction (first opening bracket to last closing bracket)
- ``json.loads`` with a container-type check

Nothing here retries; a failure is reported to the caller as
``ExtractionError``, ``ParseError``, ``ModelCallError`` or
``ModelTimeoutError``.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time
from typing import Any, Literal

from quizcraft.services.quiz.errors import (
    ExtractionError,
    ModelCallError,
    ModelTimeoutError,
    ParseError,
)

logger = logging.getLogger(__name__)

JsonKind = Literal["object", "array"]

_BRACKETS = {"object": ("{", "}"), "array": ("[", "]")}
_TYPES = {"object": dict, "array": list}

# ── JSON Extraction Patterns ──────────────────────────────────

_FENCED_BLOCK_RE = re.compile(r"```(?:json|JSON)?[ \t]*\n?(.*?)```", re.DOTALL)
_THINK_TAG_RE = re.compile(r"<think>.*?</think>", re.DOTALL | re.IGNORECASE)


def _narrow(text: str, kind: JsonKind) -> str:
    """Drop reasoning tags and, if a fenced block wraps the JSON, keep only that block.

    A fence only counts when it opens before the first bracket of the reply;
    fences inside JSON string values (code in question text) are ignored.
    """
    text = _THINK_TAG_RE.sub("", text)
    opening = _BRACKETS[kind][0]
    first_open = text.find(opening)
    if first_open == -1:
        return text
    for match in _FENCED_BLOCK_RE.finditer(text):
        if match.start() > first_open:
            break
        block = match.group(1)
        if opening in block:
            return block
    return text


def extract_json_block(text: str, kind: JsonKind = "object") -> str:
    """Return the greedy ``{...}`` (or ``[...]``) span of *text*.

    Raises:
        ExtractionError: no opening bracket, or no closing bracket after it.
    """
    if not isinstance(text, str):
        raise ExtractionError("Model reply is not text")

    opening, closing = _BRACKETS[kind]
    narrowed = _narrow(text, kind)
    start = narrowed.find(opening)
    end = narrowed.rfind(closing)
    if start == -1 or end < start:
        label = "JSON" if kind == "object" else "JSON array"
        raise ExtractionError(f"Could not extract {label} from the response")
    return narrowed[start:end + 1]


def parse_json_block(text: str, kind: JsonKind = "object") -> Any:
    """Extract and decode the JSON block of *text*.

    Raises:
        ExtractionError: see ``extract_json_block``.
        ParseError: the span is not valid JSON, or not the expected container.
    """
    block = extract_json_block(text, kind)
    try:
        data = json.loads(block)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse JSON: {exc}") from exc
    if not isinstance(data, _TYPES[kind]):
        raise ParseError(f"Expected a JSON {kind}, got {type(data).__name__}")
    return data


def _response_text(response: Any) -> str:
    content = getattr(response, "content", response)
    if isinstance(content, list):
        # Chat models may return content parts
        parts = []
        for part in content:
            if isinstance(part, dict):
                parts.append(str(part.get("text", "")))
            else:
                parts.append(str(part))
        content = "".join(parts)
    return str(content).strip()


async def invoke_text(llm: Any, prompt: str, timeout: float) -> str:
    """Send *prompt* to *llm* and return the reply text.

    Raises:
        ModelTimeoutError: no reply within *timeout* seconds.
        ModelCallError: the client raised, or the reply was empty.
    """
    start = time.monotonic()
    try:
        response = await asyncio.wait_for(llm.ainvoke(prompt), timeout=timeout)
    except asyncio.TimeoutError as exc:
        logger.error("LLM call timed out after %.1fs", timeout)
        raise ModelTimeoutError(f"LLM call exceeded {timeout:g}s timeout") from exc
    except Exception as exc:
        logger.error("LLM call failed: %s: %s", type(exc).__name__, exc)
        raise ModelCallError(f"LLM API Error: {exc}") from exc

    text = _response_text(response)
    logger.info("LLM reply received in %.2fs (%d chars)", time.monotonic() - start, len(text))
    if not text:
        raise ModelCallError("LLM returned an empty response")
    logger.debug("First 100 chars of reply: %s", text[:100])
    return text
