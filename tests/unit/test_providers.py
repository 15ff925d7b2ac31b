"""
Unit tests for the provider pipelines, run against sample pages.
"""
import logging

import pytest
import requests

from modelcatalog.models import Capability, CachedResponse, Modality, PriceCategory, PriceTier, PricePoint
from modelcatalog.providers import anthropic, fireworks, manual, opencode, openrouter, perplexity
from modelcatalog.providers.anthropic import AnthropicPipeline, anthropic_family
from modelcatalog.providers.fireworks import FireworksPipeline, fireworks_family
from modelcatalog.providers.opencode import OpencodePipeline, opencode_family
from modelcatalog.providers.openrouter import OpenRouterPipeline, openrouter_family, per_million
from modelcatalog.providers.perplexity import PerplexityPipeline
from modelcatalog.providers.registry import PROVIDERS, build_registry, create_pipeline, provider_keys


def by_id(result):
    return {r.id: r for r in result.records}


class TestAnthropic:
    @pytest.fixture
    def pipeline(self, fetcher, writer, transport, anthropic_models_html, anthropic_pricing_html, openapi_yaml):
        transport.add(anthropic.MODELS_URL, anthropic_models_html)
        transport.add(anthropic.PRICING_URL, anthropic_pricing_html)
        transport.add(anthropic.OPENAPI_URL, openapi_yaml)
        return AnthropicPipeline(fetcher, writer)

    def test_run_writes_models_and_spec(self, pipeline, writer):
        result = pipeline.run()

        assert result.updated and result.spec_updated
        assert [r.name for r in result.records] == ["Claude Haiku 3.5", "Claude Opus 4.1", "Claude Sonnet 4"]
        assert (writer.provider_dir("anthropic") / "openapi.yaml").exists()
        assert len(writer.load_models("anthropic")) == 3

    def test_dated_ids_join_pricing(self, pipeline):
        records = by_id(pipeline.run())

        opus = records["claude-opus-4-1-20250805"]
        assert opus.pricing.get(PriceCategory.TEXT_TOKENS) == PricePoint(15.0, 75.0)
        assert opus.pricing.get(PriceCategory.TEXT_TOKENS, PriceTier.CACHED) == PricePoint(18.75, 1.5)
        assert opus.family == "claude-opus-4-1"
        assert (opus.context_window, opus.max_output_tokens) == (200000, 32000)
        assert opus.modalities.input == (Modality.TEXT, Modality.IMAGE)
        assert opus.capabilities == (Capability.FUNCTION_CALLING,)

    def test_heading_only_model_has_no_pricing(self, pipeline):
        sonnet = by_id(pipeline.run())["claude-sonnet-4-20250514"]
        assert sonnet.pricing is None
        assert sonnet.max_output_tokens == 64000

    def test_derives_missing_cache_prices(self, fetcher, writer, transport, anthropic_models_html, openapi_yaml):
        transport.add(anthropic.MODELS_URL, anthropic_models_html)
        transport.add(anthropic.OPENAPI_URL, openapi_yaml)
        transport.add(anthropic.PRICING_URL, """
            <table>
              <tr><th>Model</th><th>Input</th><th>Output</th></tr>
              <tr><td>Claude Haiku 3.5</td><td>$0.80</td><td>$4</td></tr>
            </table>
        """)

        haiku = by_id(AnthropicPipeline(fetcher, writer).run())["claude-3-5-haiku-20241022"]

        assert haiku.pricing.get(PriceCategory.TEXT_TOKENS, PriceTier.CACHED) == PricePoint(1.0, 4.0)

    def test_invalid_spec_is_not_written(self, fetcher, writer, transport, anthropic_models_html):
        transport.add(anthropic.MODELS_URL, anthropic_models_html)
        transport.add(anthropic.PRICING_URL, CachedResponse(body=b"", status=500))
        transport.add(anthropic.OPENAPI_URL, "swagger: '2.0'\n")

        result = AnthropicPipeline(fetcher, writer).run()

        assert result.updated and not result.spec_updated
        assert not (writer.provider_dir("anthropic") / "openapi.yaml").exists()
        assert all(r.pricing is None for r in result.records)

    def test_models_page_failure_keeps_previous_catalog(self, pipeline, fetcher, writer, transport, clock):
        pipeline.run()
        clock.advance(3600)
        transport.add(anthropic.MODELS_URL, requests.ConnectionError("down"))

        result = AnthropicPipeline(fetcher, writer).run()

        assert not result.updated
        assert result.records == ()
        assert len(writer.load_models("anthropic")) == 3

    @pytest.mark.parametrize("api_name,family", [
        ("claude-opus-4-20250514", "claude-opus-4"),
        ("claude-3-7-sonnet-20250219", "claude-3-7-sonnet"),
        ("claude-3-haiku-20240307", "claude-3-haiku"),
        ("claude-2-1", "claude-2"),
    ])
    def test_family(self, api_name, family):
        assert anthropic_family(api_name) == family


class TestPerplexity:
    @pytest.fixture
    def result(self, fetcher, writer, transport, perplexity_models_html, perplexity_pricing_html):
        transport.add(perplexity.MODELS_URL, perplexity_models_html)
        transport.add(perplexity.PRICING_URL, perplexity_pricing_html)
        return PerplexityPipeline(fetcher, writer).run()

    def test_cards_become_records(self, result):
        assert [(r.name, r.id) for r in result.records] == [("Sonar", "sonar"), ("Sonar Pro", "sonar-pro")]
        assert not result.spec_updated

    def test_pricing_and_specs(self, result):
        records = by_id(result)
        pro = records["sonar-pro"]
        assert pro.pricing.to_dict() == {
            "text_tokens": {"standard": {"input_per_million": 3.0, "output_per_million": 15.0}},
        }
        assert (pro.context_window, pro.max_output_tokens) == (200000, 8000)
        assert pro.capabilities == (Capability.SEARCH_GROUNDING,)
        assert pro.family == "sonar-pro"
        assert records["sonar"].pricing is None

    def test_unit_prices_from_exact_headers(self, soup, perplexity_pricing_html):
        records = perplexity.pricing_extractor().extract(soup(perplexity_pricing_html))
        research = {r.api_name: r for r in records}["sonar-deep-research"]
        assert research.get("citation_price") == 2.0
        assert research.get("search_query_price") == 5.0
        assert research.get("reasoning_price") == 3.0


class TestFireworks:
    @pytest.fixture
    def records(self, fetcher, writer, transport, fireworks_models_html):
        transport.add(fireworks.MODELS_URL, fireworks_models_html)
        return by_id(FireworksPipeline(fetcher, writer).run())

    def test_qualified_ids(self, records):
        assert sorted(records) == [
            "accounts/fireworks/models/deepseek-v3p1",
            "accounts/fireworks/models/flux-1-schnell-fp8",
            "accounts/fireworks/models/whisper-v3",
        ]

    def test_chat_model(self, records):
        deepseek = records["accounts/fireworks/models/deepseek-v3p1"]
        assert deepseek.family == "deepseek-v3"
        assert (deepseek.context_window, deepseek.max_output_tokens) == (160000, 20000)
        assert deepseek.pricing.get(PriceCategory.TEXT_TOKENS) == PricePoint(0.56, 1.68)
        assert Capability.FUNCTION_CALLING in deepseek.capabilities

    def test_image_model(self, records):
        flux = records["accounts/fireworks/models/flux-1-schnell-fp8"]
        assert flux.family == "flux-1"
        assert flux.modalities.output == (Modality.TEXT, Modality.IMAGE)
        assert flux.pricing.to_dict() == {"diffusion_steps": {"standard": {"per_step": 0.00035}}}
        assert (flux.context_window, flux.max_output_tokens) == (128000, 4096)
        assert Capability.IMAGE_GENERATION in flux.capabilities

    def test_audio_model(self, records):
        whisper = records["accounts/fireworks/models/whisper-v3"]
        assert whisper.modalities.input == (Modality.AUDIO,)
        assert whisper.max_output_tokens == 16000
        assert whisper.family == "whisper-v3"
        assert whisper.pricing.to_dict() == {"audio_minutes": {"standard": {"per_minute": 0.0015}}}
        assert Capability.SPEECH_TO_TEXT in whisper.capabilities

    @pytest.mark.parametrize("api_name,family", [
        ("qwen3-coder-480b-a35b-instruct", "qwen3-coder"),
        ("qwen3-235b-a22b", "qwen3"),
        ("llama4-maverick-instruct-basic", "llama4-maverick"),
        ("flux-kontext-pro", "flux-kontext"),
        ("mixtral-8x22b-instruct", "mixtral-8x22b"),
    ])
    def test_family(self, api_name, family):
        assert fireworks_family(api_name) == family


class TestOpencode:
    @pytest.fixture
    def run(self, fetcher, writer, transport, opencode_zen_html):
        transport.add(opencode.ZEN_URL, opencode_zen_html)
        return OpencodePipeline(fetcher, writer).run()

    def test_single_page_fetched_once(self, run, transport):
        assert transport.count(opencode.ZEN_URL) == 1

    def test_names_map_to_model_ids(self, run):
        assert [(r.name, r.id) for r in run.records] == [
            ("Claude Sonnet 4.5", "claude-sonnet-4-5"),
            ("GPT 5", "gpt-5"),
            ("Grok Code Fast 1", "grok-code"),
        ]

    def test_pricing_columns(self, run):
        records = by_id(run)
        claude = records["claude-sonnet-4-5"]
        assert claude.pricing.get(PriceCategory.TEXT_TOKENS) == PricePoint(3.0, 15.0)
        assert claude.pricing.get(PriceCategory.TEXT_TOKENS, PriceTier.CACHED) == PricePoint(3.75, 0.30)
        assert claude.modalities.input == (Modality.TEXT, Modality.IMAGE)
        assert records["gpt-5"].max_output_tokens == 16384

    def test_free_is_zero(self, run):
        grok = by_id(run)["grok-code"]
        assert grok.pricing.get(PriceCategory.TEXT_TOKENS) == PricePoint(0.0, 0.0)

    @pytest.mark.parametrize("api_name,family", [
        ("gpt-5-codex", "gpt"),
        ("claude-opus-4-1", "claude-opus-4"),
        ("qwen3-coder", "qwen3"),
        ("kimi-k2", "kimi"),
        ("big-pickle", "big"),
    ])
    def test_family(self, api_name, family):
        assert opencode_family(api_name) == family


class TestOpenRouter:
    @pytest.fixture
    def run(self, fetcher, writer, transport, openrouter_models_json):
        transport.add(openrouter.MODELS_URL, openrouter_models_json)
        return OpenRouterPipeline(fetcher, writer).run()

    def test_listing_becomes_records(self, run, writer):
        assert run.updated and not run.spec_updated
        assert sorted(by_id(run)) == [
            "anthropic/claude-sonnet-4", "meta-llama/llama-3.3-70b-instruct:free", "openrouter/auto",
        ]
        assert len(writer.load_models("openrouter")) == 3

    def test_per_token_prices_become_per_million(self, run):
        sonnet = by_id(run)["anthropic/claude-sonnet-4"]
        assert sonnet.pricing.get(PriceCategory.TEXT_TOKENS) == PricePoint(3.0, 15.0)
        assert (sonnet.context_window, sonnet.max_output_tokens) == (200000, 64000)

    def test_free_and_variable_prices(self, run):
        records = by_id(run)
        assert records["meta-llama/llama-3.3-70b-instruct:free"].pricing.get(PriceCategory.TEXT_TOKENS) == PricePoint(0.0, 0.0)
        assert records["openrouter/auto"].pricing is None

    def test_modalities_and_capabilities(self, run):
        sonnet = by_id(run)["anthropic/claude-sonnet-4"]
        assert sonnet.modalities.input == (Modality.TEXT, Modality.IMAGE)
        assert sonnet.capabilities == (Capability.FUNCTION_CALLING, Capability.REASONING)
        assert sonnet.family == "anthropic"
        assert by_id(run)["meta-llama/llama-3.3-70b-instruct:free"].capabilities == ()

    def test_unparsable_listing_keeps_previous_catalog(self, run, fetcher, writer, transport, clock):
        clock.advance(3600)
        transport.add(openrouter.MODELS_URL, "<html><body>maintenance</body></html>")

        result = OpenRouterPipeline(fetcher, writer).run()

        assert not result.updated and result.stale
        assert len(writer.load_models("openrouter")) == 3

    @pytest.mark.parametrize("value,expected", [
        ("0.000003", 3.0),
        ("0.0000006", 0.6),
        ("0", 0.0),
        ("-1", None),
        (None, None),
        ("", None),
    ])
    def test_per_million(self, value, expected):
        assert per_million(value) == expected

    def test_family(self):
        assert openrouter_family("mistralai/mistral-large") == "mistralai"


class TestManualPipelines:
    def test_spec_only_run_writes_spec(self, fetcher, writer, transport, openapi_yaml):
        transport.add(manual.CoherePipeline.openapi_url, openapi_yaml)

        result = manual.CoherePipeline(fetcher, writer).run()

        assert result.spec_updated and result.skipped
        assert not result.updated and not result.stale
        assert (writer.provider_dir("cohere") / "openapi.yaml").exists()
        assert not (writer.provider_dir("cohere") / "models.jsonl").exists()

    def test_json_spec_is_stored(self, fetcher, writer, transport):
        spec = '{"openapi": "3.0.0", "info": {"title": "xAI"}, "paths": {"/v1/models": {}}}'
        transport.add(manual.XAIPipeline.openapi_url, spec)

        assert manual.XAIPipeline(fetcher, writer).run().spec_updated
        assert (writer.provider_dir("xai") / "openapi.yaml").read_text() == spec

    def test_failed_spec_pull_is_stale(self, fetcher, writer, transport):
        transport.add(manual.OpenAIPipeline.openapi_url, CachedResponse(body=b"", status=404))

        result = manual.OpenAIPipeline(fetcher, writer).run()

        assert result.skipped and result.stale
        assert "OpenAPI spec not updated" in result.error

    @pytest.mark.parametrize("pipeline_class", [
        manual.GroqPipeline, manual.MistralPipeline, manual.GooglePipeline,
        manual.TogetherPipeline, manual.AzureOpenAIPipeline,
    ])
    def test_declaration_only_run_fetches_nothing(self, pipeline_class, fetcher, writer, transport, caplog):
        with caplog.at_level(logging.INFO, logger="modelcatalog"):
            result = pipeline_class(fetcher, writer).run()

        assert result.skipped and not result.stale
        assert transport.calls == []
        assert "update skipped (maintained by hand)" in caplog.text


class TestRegistry:
    def test_keys(self):
        assert provider_keys() == [
            "anthropic", "azure-openai", "cohere", "deepseek", "fireworks-ai", "google", "groq",
            "mistral", "openai", "opencode-zen", "openrouter", "perplexity", "together", "xai",
        ]

    def test_build_registry_is_a_copy(self):
        registry = build_registry()
        registry.pop("anthropic")
        assert "anthropic" in PROVIDERS

    def test_create_pipeline(self, fetcher, writer):
        pipeline = create_pipeline("perplexity", fetcher, writer)
        assert isinstance(pipeline, PerplexityPipeline)
        assert pipeline.writer is writer

    def test_unknown_provider(self, fetcher, writer):
        with pytest.raises(KeyError, match="unknown-ai"):
            create_pipeline("unknown-ai", fetcher, writer)

    @pytest.mark.parametrize("key,flags", [
        ("anthropic", (True, True, True)),
        ("perplexity", (False, True, True)),
        ("fireworks-ai", (False, True, True)),
        ("opencode-zen", (False, True, True)),
        ("openrouter", (False, True, True)),
        ("openai", (True, False, False)),
        ("cohere", (True, False, False)),
        ("deepseek", (True, False, False)),
        ("xai", (True, False, False)),
        ("groq", (False, True, False)),
        ("mistral", (False, True, False)),
        ("google", (False, False, False)),
        ("together", (False, False, False)),
        ("azure-openai", (False, False, False)),
    ])
    def test_capability_flags(self, key, flags):
        caps = PROVIDERS[key].capabilities()
        assert (caps.api_specs, caps.model_info, caps.pricing) == flags
