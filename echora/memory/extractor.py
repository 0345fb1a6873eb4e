"""
Memory Extractor - decides whether a user message holds a durable fact.

The model is asked for ``{"shouldWrite": bool, "memory": str | null}``.
Whatever comes back is decoded strictly; anything that is not exactly
that shape becomes "nothing to remember". Malformed output can never
cause a stored fact and never raises to the caller.
"""
import json
from typing import Any, Optional

from echora.core.config import Settings, get_settings
from echora.core.exceptions import MalformedModelOutput
from echora.core.logging_config import get_logger
from echora.llm.client import CompletionClient
from echora.llm.prompts import MEMORY_EXTRACTION_SYSTEM_PROMPT
from echora.models.chat import ExtractionResult

logger = get_logger(__name__)


def decode_extraction(raw: Optional[str]) -> ExtractionResult:
    """
    Strictly decode the model's extraction output.

    Raises:
        MalformedModelOutput: Not JSON, not an object, ``shouldWrite``
            not a boolean, or ``shouldWrite`` true without a non-empty
            string memory
    """
    if raw is None:
        raise MalformedModelOutput("Extraction returned no text")

    try:
        data: Any = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedModelOutput("Extraction output is not valid JSON", raw=raw) from e

    if not isinstance(data, dict):
        raise MalformedModelOutput("Extraction output is not a JSON object", raw=raw)

    should_write = data.get("shouldWrite")
    if not isinstance(should_write, bool):
        raise MalformedModelOutput("shouldWrite is not a boolean", raw=raw)

    if not should_write:
        # memory is meaningless without shouldWrite, whatever it says
        return ExtractionResult.nothing()

    memory = data.get("memory")
    if not isinstance(memory, str) or not memory.strip():
        raise MalformedModelOutput("shouldWrite is true but memory is not a non-empty string", raw=raw)

    return ExtractionResult(should_write=True, memory=memory.strip())


def parse_extraction(raw: Optional[str]) -> ExtractionResult:
    """
    Decode extraction output, collapsing every failure to "no write".

    >>> parse_extraction('{"shouldWrite": true, "memory": "Enjoys hiking"}').memory
    'Enjoys hiking'
    >>> parse_extraction("Sure! Here is the JSON").should_write
    False
    """
    try:
        return decode_extraction(raw)
    except MalformedModelOutput as e:
        logger.warning(f"Discarding extraction output: {e.message}")
        return ExtractionResult.nothing()


class MemoryExtractor:
    """
    Runs the extraction prompt against the completion API.

    Transport failures (CompletionError, QuotaExceeded, ConfigError)
    propagate; the turn orchestrators treat them as "no write".
    """

    def __init__(
        self,
        completion_client: CompletionClient,
        settings: Optional[Settings] = None,
    ):
        self.client = completion_client
        self.settings = settings or get_settings()
        self.model = self.settings.llm_extraction_model

    def extract(self, user_message: str, api_key: Optional[str] = None) -> ExtractionResult:
        """
        Classify one user message.

        Args:
            user_message: The user's latest message
            api_key: The user's own completion key, if any

        Returns:
            ExtractionResult; should_write=False whenever the model's
            answer is unusable
        """
        if not user_message or not user_message.strip():
            return ExtractionResult.nothing()

        raw = self.client.complete(
            messages=[
                {"role": "system", "content": MEMORY_EXTRACTION_SYSTEM_PROMPT},
                {"role": "user", "content": user_message},
            ],
            model=self.model,
            temperature=0,
            api_key=api_key,
        )

        result = parse_extraction(raw)
        logger.debug(f"Extraction result: should_write={result.should_write}")
        return result
