"""
Pytest configuration and fixtures for model catalog tests.

No test touches the network: fetchers get a ``FakeTransport`` and a
no-op sleep.
"""
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
project_root = Path(__file__).parent.parent
src_path = project_root / "src"
sys.path.insert(0, str(src_path))
sys.path.insert(0, str(project_root))

import pytest
import requests
from bs4 import BeautifulSoup

from modelcatalog.catalog.writer import CatalogWriter
from modelcatalog.http.cache import CacheStore
from modelcatalog.http.fetcher import FetchSettings, ResilientFetcher
from modelcatalog.models import CachedResponse


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTransport:
    """
    Scripted transport.

    ``routes`` maps a URL to a list of outcomes consumed one per call; the
    last outcome repeats. An outcome is a CachedResponse, a str (200 body)
    or an exception instance to raise.
    """

    def __init__(self, routes=None):
        self.routes = {url: list(outcomes) for url, outcomes in (routes or {}).items()}
        self.calls = []

    def add(self, url, *outcomes):
        self.routes[url] = list(outcomes)

    def count(self, url):
        return sum(1 for called, _ in self.calls if called == url)

    def __call__(self, url, timeout):
        self.calls.append((url, timeout))
        outcomes = self.routes.get(url)
        if not outcomes:
            raise requests.ConnectionError(f"no route for {url}")

        outcome = outcomes.pop(0) if len(outcomes) > 1 else outcomes[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, str):
            return CachedResponse(body=outcome.encode("utf-8"), status=200, headers={"Content-Type": "text/html"})
        return outcome


@pytest.fixture(autouse=True)
def propagate_package_logs(monkeypatch):
    """Let caplog see records from the package logger."""
    monkeypatch.setattr(logging.getLogger("modelcatalog"), "propagate", True)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture
def cache(cache_dir, clock):
    return CacheStore(cache_dir, ttl_s=300, clock=clock)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def sleeps():
    """Records every backoff delay instead of sleeping."""
    return []


@pytest.fixture
def fetcher(cache, transport, sleeps):
    return ResilientFetcher(
        cache,
        transport=transport,
        settings=FetchSettings(timeout_s=5, max_retries=3, retry_delay_s=2),
        sleep=sleeps.append,
    )


@pytest.fixture
def writer(tmp_path):
    return CatalogWriter(tmp_path / "catalog")


@pytest.fixture
def soup():
    """Parse an HTML snippet."""
    return lambda html: BeautifulSoup(html, "html.parser")


# ============================================================================
# SAMPLE PAGES
# ============================================================================

@pytest.fixture
def model_a_html():
    """Generic pricing table with a data row whose name contains 'Model'."""
    return """
    <html><body>
      <table>
        <tr><th>Model</th><th>Input ($/1M)</th><th>Output ($/1M)</th></tr>
        <tr><td>Model A</td><td>$3</td><td>$15</td></tr>
      </table>
    </body></html>
    """


@pytest.fixture
def anthropic_models_html():
    return """
    <html><body>
      <h1>Models overview</h1>
      <table>
        <tr><th>Model</th><th>Claude API</th><th>AWS Bedrock</th><th>GCP Vertex AI</th></tr>
        <tr>
          <td>Claude Opus 4.1</td>
          <td>claude-opus-4-1-20250805</td>
          <td>anthropic.claude-opus-4-1-20250805-v1:0</td>
          <td>claude-opus-4-1@20250805</td>
        </tr>
        <tr>
          <td>Claude Haiku 3.5</td>
          <td>claude-3-5-haiku-20241022</td>
          <td>anthropic.claude-3-5-haiku-20241022-v1:0</td>
          <td>claude-3-5-haiku@20241022</td>
        </tr>
        <tr><td>Broken row</td><td>gpt 4 turbo</td></tr>
      </table>
      <h2>Claude Sonnet 4</h2>
      <p>Our balanced model.</p>
      <p>Use <code>claude-sonnet-4-20250514</code> in the API.</p>
      <h2>Claude Opus 4.1</h2>
      <p><code>claude-opus-4-1-20250805</code></p>
    </body></html>
    """


@pytest.fixture
def anthropic_pricing_html():
    return """
    <html><body>
      <table>
        <tr>
          <th>Model</th><th>Base Input Tokens</th><th>5m Cache Writes</th>
          <th>Cache Hits &amp; Refreshes</th><th>Output Tokens</th>
        </tr>
        <tr><td>Claude Opus 4.1</td><td>$15 / MTok</td><td>$18.75 / MTok</td><td>$1.50 / MTok</td><td>$75 / MTok</td></tr>
        <tr><td>Claude Haiku 3.5</td><td>$0.80 / MTok</td><td>$1 / MTok</td><td>$0.08 / MTok</td><td>$4 / MTok</td></tr>
      </table>
    </body></html>
    """


@pytest.fixture
def perplexity_models_html():
    return """
    <html><body>
      <a href="/getting-started/models/models/sonar-pro">
        <div class="text-base font-semibold">Sonar Pro</div>
        <p>Advanced search offering</p>
      </a>
      <a href="/getting-started/models/models/sonar">
        <div class="font-semibold">Sonar</div>
      </a>
      <a href="/getting-started/models/models/sonar-pro">
        <div class="font-semibold">Sonar Pro duplicate</div>
      </a>
    </body></html>
    """


@pytest.fixture
def perplexity_pricing_html():
    return """
    <html><body>
      <table>
        <tr>
          <th>Model</th><th>Input Tokens ($/1M)</th><th>Output Tokens ($/1M)</th>
          <th>Citation Tokens ($/1M)</th><th>Search Queries ($/1K)</th><th>Reasoning Tokens ($/1M)</th>
        </tr>
        <tr><td>Sonar Pro</td><td>$3</td><td>$15</td><td>-</td><td>-</td><td>-</td></tr>
        <tr><td>Sonar Deep Research</td><td>$2</td><td>$8</td><td>$2</td><td>$5</td><td>$3</td></tr>
      </table>
    </body></html>
    """


@pytest.fixture
def fireworks_models_html():
    return """
    <html><body>
      <a href="/models/fireworks/deepseek-v3p1">
        <h3>DeepSeek V3.1</h3>
        <span>$0.56/M Input</span> <span>$1.68/M Output</span>
        <span>160k Context</span> <span>Serverless</span> <span>Function calling</span>
      </a>
      <a href="/models/fireworks/flux-1-schnell-fp8">
        <h3>FLUX.1 [schnell] FP8</h3>
        <span>$0.00035/step</span>
      </a>
      <a href="/models/fireworks/whisper-v3">
        <h3>Whisper V3 Large</h3>
        <span>$0.0015/minute</span> <span>Audio</span>
      </a>
      <a href="/models/fireworks/Bad Name">
        <h3>Invalid Model</h3>
      </a>
    </body></html>
    """


@pytest.fixture
def opencode_zen_html():
    return """
    <html><body>
      <h2>Endpoints</h2>
      <table>
        <tr><th>Model</th><th>Model ID</th><th>Endpoint</th></tr>
        <tr><td>GPT 5</td><td>gpt-5</td><td>https://opencode.ai/zen/v1/responses</td></tr>
        <tr><td>Claude Sonnet 4.5</td><td>claude-sonnet-4-5</td><td>https://opencode.ai/zen/v1/messages</td></tr>
        <tr><td>Grok Code Fast 1</td><td>grok-code</td><td>https://opencode.ai/zen/v1/chat/completions</td></tr>
      </table>
      <h2>Pricing</h2>
      <table>
        <tr><th>Model</th><th>Input</th><th>Output</th><th>Cached Read</th><th>Cached Write</th></tr>
        <tr><td>GPT 5</td><td>$1.25</td><td>$10.00</td><td>$0.125</td><td>-</td></tr>
        <tr><td>Claude Sonnet 4.5</td><td>$3.00</td><td>$15.00</td><td>$0.30</td><td>$3.75</td></tr>
        <tr><td>Grok Code Fast 1</td><td>Free</td><td>Free</td><td>Free</td><td>-</td></tr>
      </table>
    </body></html>
    """


@pytest.fixture
def openapi_yaml():
    return "openapi: 3.1.0\ninfo:\n  title: Anthropic API\n  version: 0.0.1\npaths:\n  /v1/messages:\n    post: {}\n"


@pytest.fixture
def openrouter_models_json():
    return json.dumps({"data": [
        {
            "id": "anthropic/claude-sonnet-4",
            "name": "Anthropic: Claude Sonnet 4",
            "context_length": 200000,
            "architecture": {"input_modalities": ["text", "image", "file"], "output_modalities": ["text"]},
            "pricing": {"prompt": "0.000003", "completion": "0.000015"},
            "top_provider": {"max_completion_tokens": 64000},
            "supported_parameters": ["tools", "reasoning", "temperature"],
        },
        {
            "id": "meta-llama/llama-3.3-70b-instruct:free",
            "name": "Meta: Llama 3.3 70B Instruct (free)",
            "context_length": 131072,
            "architecture": {"input_modalities": ["text"], "output_modalities": ["text"]},
            "pricing": {"prompt": "0", "completion": "0"},
            "top_provider": {"max_completion_tokens": None},
            "supported_parameters": ["temperature"],
        },
        {
            "id": "openrouter/auto",
            "name": "Auto Router",
            "context_length": 2000000,
            "architecture": {"input_modalities": ["text"], "output_modalities": ["text"]},
            "pricing": {"prompt": "-1", "completion": "-1"},
        },
        {"id": "not an id", "name": "Broken"},
    ]})
