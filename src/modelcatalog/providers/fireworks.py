"""
Fireworks AI: serverless model cards on the public models page.

Each card links to ``/models/fireworks/<api-name>`` and lists its prices,
context window and a few descriptive tags. The catalog id is the fully
qualified ``accounts/fireworks/models/<api-name>``.
"""
from __future__ import annotations

from typing import List, Tuple

from ..extractors import CardExtractor, IdentifierGrammar, PricePattern
from ..models import Capability, Modalities, Modality, ModelSpec, RawRecord
from ..services.normalizer import RecordNormalizer, SpecTable, default_family
from .base import ProviderPipeline

MODELS_URL = "https://app.fireworks.ai/models"
ID_PREFIX = "accounts/fireworks/models/"

GRAMMAR = IdentifierGrammar("fireworks-ai", r"^[a-z0-9-]+(?:-[a-z0-9-]+)*$")

SPECS = SpecTable(
    default=ModelSpec(context_window=128000, max_output_tokens=4096),
    keyword_rules=(
        (("asr", "whisper"), ModelSpec(max_output_tokens=16000)),
        (("flux",), ModelSpec(max_output_tokens=4096)),
        (("deepseek", "kimi"), ModelSpec(max_output_tokens=20000)),
    ),
)

PRICE_PATTERNS = (
    PricePattern.of(r"\$([\d.]+)\s*/\s*M\s+Input", "input_price"),
    PricePattern.of(r"\$([\d.]+)\s*/\s*M\s+Output", "output_price"),
    PricePattern.of(r"\$([\d.]+)\s*/\s*M\s+Tokens", "input_price", "output_price"),
    PricePattern.of(r"\$([\d.]+)\s*/\s*step", "step_price"),
    PricePattern.of(r"\$([\d.]+)\s*/\s*minute", "minute_price"),
    PricePattern.of(r"\$([\d.]+)\s*/\s*ea\b", "image_price"),
)

CAPABILITY_KEYWORDS = {
    Capability.FUNCTION_CALLING: ("function", "tool"),
    Capability.FINE_TUNING: ("tunable", "fine", "train"),
    Capability.VISION: ("vision", "vl", "glm-4p5v"),
    Capability.IMAGE_GENERATION: ("flux", "image generation"),
    Capability.SPEECH_TO_TEXT: ("asr", "speech", "whisper", "audio"),
}

# (keyword, family) pairs, first match wins
FAMILY_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("deepseek",), "deepseek-v3"),
    (("kimi",), "kimi-k2"),
    (("gpt-oss",), "gpt-oss"),
    (("qwen3", "coder"), "qwen3-coder"),
    (("qwen3",), "qwen3"),
    (("qwen2p5",), "qwen2p5-vl"),
    (("llama4", "maverick"), "llama4-maverick"),
    (("llama4", "scout"), "llama4-scout"),
    (("llama4",), "llama4"),
    (("glm",), "glm-4p5v"),
    (("flux", "kontext"), "flux-kontext"),
    (("flux",), "flux-1"),
)


def fireworks_family(api_name: str) -> str:
    for keywords, family in FAMILY_RULES:
        if all(k in api_name for k in keywords):
            return family
    if "asr" in api_name or "whisper" in api_name:
        return api_name
    return default_family(api_name)


def fireworks_modalities(record: RawRecord) -> Modalities:
    """Modalities from the card text and identifier."""
    text = record.context.lower()
    api_name = record.api_name or ""

    if any(k in text or k in api_name for k in ("audio", "asr", "whisper")):
        return Modalities.of((Modality.AUDIO,), (Modality.TEXT,))

    inputs = [Modality.TEXT]
    outputs = [Modality.TEXT]
    if "vision" in text or "vl" in api_name or "glm-4p5v" in api_name or "llama4-maverick" in api_name:
        inputs.append(Modality.IMAGE)
    if "flux" in api_name or ("image" in text and "generation" in text):
        outputs.append(Modality.IMAGE)
    return Modalities.of(inputs, outputs)


def model_extractor() -> CardExtractor:
    return CardExtractor(
        grammar=GRAMMAR,
        selector='a[href*="/models/fireworks/"]',
        href_pattern=r"/models/fireworks/(.+)",
        name="fireworks model cards",
        price_patterns=PRICE_PATTERNS,
        capability_keywords=CAPABILITY_KEYWORDS,
    )


class FireworksPipeline(ProviderPipeline):
    """Prices ride on the model cards, so there is no separate pricing page."""

    key = "fireworks-ai"
    display_name = "Fireworks AI"
    can_pull_model_info = True
    can_pull_pricing = True

    def fetch_model_records(self) -> List[RawRecord]:
        document = self.fetch_document(MODELS_URL, "models page")
        if document is None:
            return []
        return model_extractor().extract(document)

    def normalizer(self) -> RecordNormalizer:
        return RecordNormalizer(
            provider=self.key,
            specs=SPECS,
            family_for=fireworks_family,
            id_for=lambda api_name: f"{ID_PREFIX}{api_name}",
            modalities_for=fireworks_modalities,
        )
