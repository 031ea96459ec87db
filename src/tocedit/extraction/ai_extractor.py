"""
AI-assisted TOC extraction.

Sends the beginning of the document text to the Mistral chat API and asks for the
heading structure as JSON. The API key is passed in through AiExtractionConfig; the
outline builder and serializer never see it.
"""

import json
import re
from typing import Any, List, Optional

from globalog import LOG
from mistralai import Mistral
from mistralai.extra import response_format_from_pydantic_model
from pydantic import BaseModel, Field, ValidationError

from tocedit.exceptions import ExternalServiceError
from tocedit.extraction.ai_config import AiExtractionConfig
from tocedit.toc.models import TocDraft


SYSTEM_PROMPT = (
    "You are an expert at extracting the table of contents of PDF documents. "
    "Analyse the document text provided by the user and identify its heading structure. "
    'Return JSON of the form {"entries": [{"title": "Heading", "page": 1, "level": 1}]} '
    "where level is 1 for chapters, 2 for sections and 3 for sub-sections. "
    "Return only the JSON, nothing else."
)

JSON_ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


class ExtractedHeading(BaseModel):
    """A heading as returned by the model; checked against TocDraft afterwards."""
    title: str = Field(..., description="Heading text exactly as it appears in the document.")
    page: int = Field(..., description="Page number where the heading appears.")
    level: int = Field(..., description="1 for chapters, 2 for sections, 3 for sub-sections.")


class ExtractedToc(BaseModel):
    """Structured response expected from the model."""
    entries: List[ExtractedHeading] = Field(..., description="Detected headings in document order.")


class AiTocExtractor:
    """
    Extracts TOC drafts from document text with a chat completion model.
    """

    def __init__(self, config: AiExtractionConfig, client: Optional[Any] = None):
        """
        Initialize the extractor.

        Args:
            config: Model parameters and API key
            client: Pre-built chat client (a Mistral client is created from the API key otherwise)

        Raises:
            ValueError: If neither a client nor an API key is provided
        """
        if client is None and not config.api_key:
            raise ValueError("MISTRAL_API_KEY is not set. Please provide a valid API key.")
        self.config = config
        self.client = client if client is not None else Mistral(api_key=config.api_key)

    def extract(self, text: str) -> List[TocDraft]:
        """
        Extract TOC entries from document text.

        Args:
            text: Document text; only the first config.max_chars characters are sent.

        Returns:
            List[TocDraft]: Detected entries, empty if the response could not be parsed.

        Raises:
            ValueError: If the text is empty
            ExternalServiceError: If the API call fails
        """
        if not text or not text.strip():
            raise ValueError("No document text to extract a TOC from.")

        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Extract the table of contents from this PDF text:\n\n{text[:self.config.max_chars]}",
            },
        ]

        try:
            LOG.info(f"Requesting TOC extraction from model {self.config.model}...")
            response = self.client.chat.complete(
                model=self.config.model,
                messages=messages,
                response_format=response_format_from_pydantic_model(ExtractedToc),
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
            content = response.choices[0].message.content
        except Exception as exc:
            LOG.error("TOC extraction request failed", exc_info=exc)
            raise ExternalServiceError(f"TOC extraction request failed: {exc}") from exc

        drafts = parse_toc_response(content or "")
        LOG.info(f"AI extraction returned {len(drafts)} TOC entries.")
        return drafts


def parse_toc_response(content: str) -> List[TocDraft]:
    """
    Parse the model's answer into TOC drafts.

    Accepts {"entries": [...]}, a bare JSON list, or a list embedded in other text
    (e.g. a markdown code block). Items that are not valid drafts are dropped.
    """
    items = _load_items(content)
    if items is None:
        LOG.warning("Could not parse TOC extraction response; returning no entries.")
        return []

    drafts = []
    for item in items:
        try:
            drafts.append(TocDraft.model_validate(item))
        except ValidationError as e:
            LOG.warning(f"Dropping invalid TOC item {item!r}: {e.error_count()} validation errors")
    return drafts


def _load_items(content: str) -> Optional[List[Any]]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError:
        match = JSON_ARRAY_PATTERN.search(content)
        if not match:
            return None
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError:
            return None

    if isinstance(data, dict):
        data = data.get("entries")
    if not isinstance(data, list):
        return None
    return data
