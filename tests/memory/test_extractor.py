"""Tests for memory extraction decoding and MemoryExtractor."""

import httpx
import pytest
from groq import RateLimitError

from echora.core.exceptions import MalformedModelOutput, QuotaExceeded
from echora.memory.extractor import MemoryExtractor, decode_extraction, parse_extraction
from echora.models.chat import ExtractionResult

from conftest import FakeGroq


class TestDecodeExtraction:
    """Strict decoding of the model's JSON answer."""

    def test_write(self):
        result = decode_extraction('{"shouldWrite": true, "memory": " Enjoys hiking on weekends "}')
        assert result.should_write is True
        assert result.memory == "Enjoys hiking on weekends"

    def test_no_write(self):
        result = decode_extraction('{"shouldWrite": false, "memory": null}')
        assert result == ExtractionResult.nothing()

    def test_no_write_drops_memory(self):
        """A memory without shouldWrite=true is discarded."""
        result = decode_extraction('{"shouldWrite": false, "memory": "Is tired"}')
        assert result.memory is None

    @pytest.mark.parametrize(
        "raw",
        [
            None,
            "",
            "Sure! Here you go",
            "[1, 2, 3]",
            '{"memory": "Enjoys hiking"}',
            '{"shouldWrite": "true", "memory": "Enjoys hiking"}',
            '{"shouldWrite": true, "memory": null}',
            '{"shouldWrite": true, "memory": "   "}',
            '{"shouldWrite": true, "memory": 42}',
        ],
    )
    def test_malformed(self, raw):
        with pytest.raises(MalformedModelOutput):
            decode_extraction(raw)


class TestParseExtraction:
    """parse_extraction never raises."""

    def test_malformed_is_nothing(self):
        assert parse_extraction("not json at all") == ExtractionResult.nothing()

    def test_valid_passes_through(self):
        assert parse_extraction('{"shouldWrite": true, "memory": "Has a dog"}').memory == "Has a dog"


class TestExtractionResultModel:
    """The wire model enforces the same rule as the decoder."""

    def test_alias_round_trip(self):
        result = ExtractionResult.model_validate({"shouldWrite": True, "memory": "Has a dog"})
        assert result.model_dump(by_alias=True) == {"shouldWrite": True, "memory": "Has a dog"}

    def test_memory_dropped_without_write(self):
        result = ExtractionResult.model_validate({"shouldWrite": False, "memory": "Is tired"})
        assert result.memory is None


class TestMemoryExtractor:
    """Tests for MemoryExtractor.extract."""

    def test_durable_fact(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        fake_groq.extraction = '{"shouldWrite": true, "memory": "Enjoys hiking on weekends"}'
        result = extractor.extract("I love hiking on weekends")
        assert result.should_write
        assert result.memory == "Enjoys hiking on weekends"

        call = fake_groq.extraction_calls[-1]
        assert call["model"] == extractor.model
        assert call["temperature"] == 0
        assert call["messages"][1] == {"role": "user", "content": "I love hiking on weekends"}

    def test_transient_state(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        fake_groq.extraction = '{"shouldWrite": false, "memory": null}'
        assert not extractor.extract("I'm tired").should_write

    def test_prose_answer(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        fake_groq.extraction = "I think the user likes hiking!"
        assert extractor.extract("I love hiking") == ExtractionResult.nothing()

    def test_empty_answer(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        fake_groq.extraction = None
        assert extractor.extract("I love hiking") == ExtractionResult.nothing()

    def test_blank_message_skips_call(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        assert extractor.extract("   ") == ExtractionResult.nothing()
        assert fake_groq.calls == []

    def test_quota_propagates(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        """Transport failures are the caller's to handle."""
        request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
        fake_groq.extraction = RateLimitError(
            "Error code: 429", response=httpx.Response(429, request=request), body=None
        )
        with pytest.raises(QuotaExceeded):
            extractor.extract("I love hiking")

    def test_uses_user_key(self, extractor: MemoryExtractor, fake_groq: FakeGroq):
        extractor.extract("I love hiking", api_key="gsk_user_key")
        assert fake_groq.api_keys == ["gsk_user_key"]
