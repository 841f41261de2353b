"""LLM extraction of event fields from page markdown."""

import json
import logging
import re
from datetime import datetime
from typing import Any

from openai import (
    AsyncOpenAI,
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    OpenAIError,
    PermissionDeniedError,
)
from pydantic import ValidationError

from eventscape.config import settings
from eventscape.exceptions import ExtractionError
from eventscape.models.category import CATEGORIES
from eventscape.schemas.extraction import ExtractedEvent
from eventscape.services.retry import RetryPolicy
from eventscape.utils.dates import SINGAPORE_TZ

logger = logging.getLogger(__name__)

# Requests that will fail the same way on every attempt
NON_RETRYABLE_ERRORS = (
    AuthenticationError,
    BadRequestError,
    NotFoundError,
    PermissionDeniedError,
)

MAX_MARKDOWN_CHARS = 60000

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def _category_lines() -> str:
    return "\n".join(f'{category_id}: "{name}"' for category_id, name in CATEGORIES.items())


SYSTEM_PROMPT = f"""You extract event information from the markdown of a Singapore events article.

Extract:
- name (required)
- date (date only, no time; e.g. "22 May 2025", "22 May - 15 Jun 2025", "Now - 31 Aug 2025", "Every Friday") or null
- time (time only, no date; e.g. "9:00am - 9:00pm", "Mon - Fri: 10:00am - 6:00pm") or null
- location (required; the first venue mentioned, with full address and 6-digit postal code when present)
- description (required; 1-2 sentences)
- category_ids (required; 1-3 ids from the list below, most relevant first)
- store_type (required; "event" or "permanent_store")
- store_type_reasoning (required; which indicators decided the store type)
- opening_hours_structured (optional; list of {{"day", "open", "close", "closed"}} with 24h "HH:MM" times)

Store type:
- "event": time-limited activities such as festivals, concerts, exhibitions, workshops, tours and performances
- "permanent_store": restaurants, cafes, shops, museums and attractions that operate regularly with opening hours
- No end date and only opening hours means "permanent_store"
- The opening of a new business is a "permanent_store", not an event

Dates and times:
- Interpret relative dates ("this weekend", "from now till 31 Aug") against the current Singapore time given below
- Separate a range with " - "
- Condense consecutive days with the same hours: "Mon - Wed: 9:00am - 9:00pm"
- Write times without a space before am/pm
- Never invent a date or time that the content does not state

Available categories:
{_category_lines()}

Return a single JSON object with the fields above. If the content describes no event or venue, return
{{"error": "<reason>"}} instead."""


def build_user_prompt(markdown: str, source_url: str, now: datetime | None = None) -> str:
    """User message for one extraction request, stamped with Singapore time."""
    now = now or datetime.now(SINGAPORE_TZ)
    singapore_time = now.astimezone(SINGAPORE_TZ).strftime("%A, %d %B %Y, %H:%M")
    return (
        "Please extract event information from this markdown content:\n\n"
        f"Current Singapore time: {singapore_time}\n"
        f"Source URL: {source_url}\n\n"
        f"Markdown Content:\n{markdown[:MAX_MARKDOWN_CHARS]}"
    )


def load_json_object(content: str) -> dict[str, Any]:
    """
    Parse an LLM response into a JSON object.

    Tolerates a surrounding markdown code fence and prose around the object.

    Raises:
        ExtractionError: if no JSON object can be decoded
    """
    text = _CODE_FENCE.sub("", content.strip())
    start, end = text.find("{"), text.rfind("}")
    if start == -1 or end < start:
        raise ExtractionError("LLM response contained no JSON object")

    try:
        payload = json.loads(text[start : end + 1])
    except json.JSONDecodeError as e:
        raise ExtractionError(f"LLM response was not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise ExtractionError("LLM response was not a JSON object")
    return payload


def parse_extraction(content: str) -> ExtractedEvent:
    """
    Validate a raw LLM response into an ``ExtractedEvent``.

    Raises:
        ExtractionError: for error objects, malformed JSON or invalid fields
    """
    payload = load_json_object(content)

    if payload.get("error"):
        raise ExtractionError(str(payload["error"]))

    try:
        return ExtractedEvent.model_validate(payload)
    except ValidationError as e:
        raise ExtractionError(f"Invalid extraction payload: {e}") from e


class EventExtractor:
    """Turns page markdown into validated event fields using an OpenAI chat model."""

    TEMPERATURE = 0.1
    MAX_TOKENS = 1000

    def __init__(
        self,
        client: AsyncOpenAI,
        model: str | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """
        Initialize extractor.

        Args:
            client: OpenAI client
            model: Chat model name (uses settings if not provided)
            retry_policy: Retry policy for the API call
        """
        self.client = client
        self.model = model or settings.openai_model
        self.retry_policy = (retry_policy or RetryPolicy.from_settings()).with_non_retryable(
            *NON_RETRYABLE_ERRORS
        )

    async def extract(
        self,
        markdown: str,
        source_url: str,
        now: datetime | None = None,
    ) -> ExtractedEvent:
        """
        Extract event fields from ``markdown``.

        Args:
            markdown: Page content as markdown
            source_url: URL the content was read from
            now: Reference time for relative dates (defaults to now in Singapore)

        Returns:
            Validated extraction

        Raises:
            ExtractionError: if the API call fails or the response is unusable
        """
        if not markdown or not markdown.strip():
            raise ExtractionError(f"No content to extract from {source_url}")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_user_prompt(markdown, source_url, now)},
        ]

        try:
            completion = await self.retry_policy.run(
                self.client.chat.completions.create,
                model=self.model,
                messages=messages,
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except OpenAIError as e:
            raise ExtractionError(f"LLM request failed: {e}") from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise ExtractionError("No response from LLM")

        extracted = parse_extraction(content)
        logger.info(
            f"Extracted '{extracted.name}' ({extracted.store_type}, "
            f"categories {extracted.category_ids}) from {source_url}"
        )
        return extracted
