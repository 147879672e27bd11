"""Tests for summary expansion — preamble stripping and the enricher backends."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from openai import APIError

from newsfeed.services.translation.deepl import DeepLClient, TranslationError
from newsfeed.services.translation.enrichment import (
    EXPAND_INSTRUCTIONS,
    DeepLEnricher,
    LLMEnricher,
    build_enricher,
    strip_preamble,
)


class TestStripPreamble:
    def test_strips_through_full_width_colon(self):
        response = "次の文章を詳しく説明してください：これは詳しい説明です。"
        assert strip_preamble(response, "fallback") == "これは詳しい説明です。"

    def test_strips_through_last_ascii_colon(self):
        assert strip_preamble("Explain: note: the payload", "fb") == "the payload"

    def test_no_delimiter_returns_fallback(self):
        assert strip_preamble("just some text", "original") == "original"

    def test_nothing_after_delimiter_returns_fallback(self):
        assert strip_preamble("Explain the following:  ", "original") == "original"


def _openai_response(content):
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    return response


class TestDeepLEnricher:
    async def test_prefixes_instruction_and_strips_echo(self):
        client = DeepLClient(api_key="k", target_lang="JA")
        client.translate = AsyncMock(return_value="説明してください：詳しい要約です。")

        result = await DeepLEnricher(client).expand("短い要約")

        client.translate.assert_awaited_once_with(EXPAND_INSTRUCTIONS["JA"] + "短い要約")
        assert result == "詳しい要約です。"

    async def test_unusable_response_keeps_input(self):
        client = DeepLClient(api_key="k")
        client.translate = AsyncMock(return_value="no delimiter anywhere")

        assert await DeepLEnricher(client).expand("短い要約") == "短い要約"

    async def test_translation_error_propagates(self):
        client = DeepLClient(api_key="k")
        client.translate = AsyncMock(side_effect=TranslationError("quota"))

        with pytest.raises(TranslationError):
            await DeepLEnricher(client).expand("text")


class TestLLMEnricher:
    async def test_returns_json_text(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            return_value=_openai_response(json.dumps({"text": " 拡張された要約 "}))
        )

        result = await LLMEnricher(client, model="test-model").expand("要約")

        assert result == "拡張された要約"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert "Japanese" in kwargs["messages"][0]["content"]

    @pytest.mark.parametrize("content", ["not json", "{}", '{"text": ""}', None])
    async def test_bad_response_raises(self, content):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=_openai_response(content))

        with pytest.raises(TranslationError):
            await LLMEnricher(client, model="m").expand("要約")

    @pytest.mark.parametrize("choices", [[], None])
    async def test_missing_choices_raises(self, choices):
        response = MagicMock()
        response.choices = choices
        client = MagicMock()
        client.chat.completions.create = AsyncMock(return_value=response)

        with pytest.raises(TranslationError, match="No completion"):
            await LLMEnricher(client, model="m").expand("要約")

    async def test_api_error_wrapped(self):
        client = MagicMock()
        client.chat.completions.create = AsyncMock(
            side_effect=APIError("boom", request=MagicMock(), body=None)
        )

        with pytest.raises(TranslationError, match="LLM API error"):
            await LLMEnricher(client, model="m").expand("要約")


class TestBuildEnricher:
    def test_none_backend(self, mock_settings):
        assert build_enricher(mock_settings) is None

    def test_deepl_backend_reuses_client(self, mock_settings):
        mock_settings.enrichment_backend = "deepl"
        deepl = DeepLClient(api_key="k")
        enricher = build_enricher(mock_settings, deepl)
        assert isinstance(enricher, DeepLEnricher)
        assert enricher.client is deepl

    def test_llm_backend_without_key_disabled(self, mock_settings):
        mock_settings.enrichment_backend = "llm"
        mock_settings.openai_api_key = ""
        assert build_enricher(mock_settings) is None

    def test_llm_backend(self, mock_settings):
        mock_settings.enrichment_backend = "llm"
        mock_settings.openai_api_key = "sk-test"
        enricher = build_enricher(mock_settings)
        assert isinstance(enricher, LLMEnricher)
        assert enricher.model == mock_settings.openai_model
