"""Tests for label derivation and the title generation fallback."""

import json

import httpx
import pytest

from app.services.label_service import (
    LabelService,
    TITLE_MAX_TOKENS,
    first_four_words,
    truncate_title,
)

LONG_QUESTION = "Can you explain how photosynthesis works in plants and why leaves are green?"


class TestFirstFourWords:
    def test_trims_and_collapses_whitespace(self):
        assert first_four_words("  hello   world  ") == "hello world"

    def test_keeps_first_four_in_order(self):
        assert first_four_words("Sure! Here is a short answer for you") == "Sure! Here is a"

    def test_fewer_than_four_words_returns_all(self):
        assert first_four_words("one two three") == "one two three"

    def test_tabs_and_newlines_are_separators(self):
        assert first_four_words("alpha\tbeta\n\ngamma delta epsilon") == "alpha beta gamma delta"

    @pytest.mark.parametrize("text", [
        "a",
        "a b c d",
        "  a  b c d e f  ",
        "The quick brown fox jumps over the lazy dog",
    ])
    def test_token_count_and_order(self, text):
        tokens = text.split()
        result = first_four_words(text).split()
        assert result == tokens[:4]
        assert len(result) == min(4, len(tokens))


def test_truncate_title_cuts_at_fifty_characters():
    assert truncate_title(LONG_QUESTION) == LONG_QUESTION[:50] + "..."
    assert len(truncate_title(LONG_QUESTION)) == 53


def test_truncate_title_keeps_short_text_and_adds_ellipsis():
    assert truncate_title("Hi") == "Hi..."


class TestGenerateLabel:
    async def test_uses_trimmed_model_output(self, make_llm_client):
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"choices": [{"message": {"content": "  Photosynthesis Basics \n"}}]})

        service = LabelService(make_llm_client(handler))
        label = await service.generate_label(LONG_QUESTION, "Plants convert light into energy.")

        assert label == "Photosynthesis Basics"
        payload = seen[0]
        assert payload["max_tokens"] == TITLE_MAX_TOKENS
        assert payload["temperature"] < 0.5
        assert payload["messages"][0]["role"] == "system"
        assert LONG_QUESTION in payload["messages"][1]["content"]
        assert "Plants convert light into energy." in payload["messages"][1]["content"]

    async def test_network_error_falls_back_to_truncated_message(self, make_llm_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = LabelService(make_llm_client(handler))
        label = await service.generate_label(LONG_QUESTION, "whatever")

        assert label == LONG_QUESTION[:50] + "..."

    async def test_error_status_falls_back(self, make_llm_client):
        service = LabelService(make_llm_client(lambda request: httpx.Response(503, text="overloaded")))
        assert await service.generate_label("Tell me a joke", "No.") == "Tell me a joke..."

    async def test_blank_output_falls_back(self, make_llm_client):
        def handler(request):
            return httpx.Response(200, json={"choices": [{"message": {"content": "   "}}]})

        service = LabelService(make_llm_client(handler))
        assert await service.generate_label("Tell me a joke", "No.") == "Tell me a joke..."

    async def test_missing_api_key_falls_back_without_calling_out(self, make_llm_client):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200, json={"choices": [{"message": {"content": "Nope"}}]})

        service = LabelService(make_llm_client(handler, api_key=None))
        assert await service.generate_label("Tell me a joke", "No.") == "Tell me a joke..."
        assert calls == []
