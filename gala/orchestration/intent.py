"""Intent analysis: model-assisted JSON decode with a keyword fallback."""

import json
import logging
from typing import Any, Optional

from pydantic import ValidationError

from gala.orchestration.prompts import INTENT_PROMPT_TEMPLATE
from gala.schemas import TaskIntent

logger = logging.getLogger(__name__)


class IntentParseError(Exception):
    """Router reply did not contain a usable intent object."""

    pass


def _balanced_object_end(text: str, start: int) -> Optional[int]:
    """Index one past the brace closing the object opened at start."""
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return index + 1
    return None


def extract_json_object(text: str) -> Optional[dict[str, Any]]:
    """Return the first balanced ``{...}`` block in text that parses as a JSON object.

    Braces inside string literals are ignored. Blocks that are balanced
    but not valid JSON are skipped.
    """
    start = text.find("{")
    while start != -1:
        end = _balanced_object_end(text, start)
        if end is None:
            return None
        try:
            parsed = json.loads(text[start:end])
        except json.JSONDecodeError:
            parsed = None
        if isinstance(parsed, dict):
            return parsed
        start = text.find("{", start + 1)
    return None


def intent_from_payload(data: dict[str, Any]) -> TaskIntent:
    """Build a TaskIntent from a decoded router reply.

    Accepts both ``requiredTools`` and ``required_tools`` keys.

    Raises:
        IntentParseError: If the payload does not describe a valid intent
    """
    tools = data.get("required_tools", data.get("requiredTools")) or []
    confidence = data.get("confidence")
    if confidence is None:
        confidence = 0.5

    try:
        return TaskIntent(
            intent=data.get("intent") or "unknown",
            entities=data.get("entities") or {},
            confidence=confidence,
            required_tools=tools,
            suggested_workflow=data.get("suggested_workflow", data.get("suggestedWorkflow")),
        )
    except ValidationError as e:
        raise IntentParseError(f"Invalid intent payload: {e}") from e


def fallback_intent_detection(user_input: str, context: Optional[dict[str, Any]] = None) -> TaskIntent:
    """Deterministic keyword classifier used when model decoding fails."""
    context = context or {}
    lower = user_input.lower()
    files = context.get("files")

    mentions_media = any(word in lower for word in ("photo", "image", "picture"))
    if "post" in lower and (mentions_media or files):
        return TaskIntent(
            intent="social_media_post",
            entities={"content_type": "photos", "files": files or []},
            confidence=0.8,
            required_tools=[
                "image_analyzer",
                "caption_generator",
                "hashtag_generator",
                "social_media_poster",
            ],
            suggested_workflow="photo_to_social_media",
        )

    if "email" in lower and ("campaign" in lower or "send" in lower):
        return TaskIntent(
            intent="email_campaign",
            confidence=0.8,
            required_tools=["email_service"],
        )

    if "portfolio" in lower or "website" in lower:
        return TaskIntent(
            intent="portfolio_update",
            confidence=0.7,
            required_tools=["cms_api", "file_uploader"],
        )

    return TaskIntent(intent="general_query", confidence=0.5)


def build_intent_prompt(user_input: str, context: Optional[dict[str, Any]] = None) -> str:
    context_line = f"Context: {json.dumps(context, default=str)}\n" if context else ""
    return INTENT_PROMPT_TEMPLATE.format(user_input=user_input, context_line=context_line)


def parse_intent_response(response: str) -> TaskIntent:
    """Decode a router reply into a TaskIntent.

    Raises:
        IntentParseError: If no JSON object is found or it is invalid
    """
    data = extract_json_object(response)
    if data is None:
        raise IntentParseError("No JSON object found in router response")
    return intent_from_payload(data)
