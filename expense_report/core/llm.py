"""
Optional LLM suggestions for new expense entries (description and date).

Supports Anthropic, OpenAI and Azure OpenAI. Any failure yields an empty
suggestion; the regex amount and date parsing never depend on it.
"""

import json
import os
from enum import Enum
from typing import Dict, Optional

from .utils import MAX_DESCRIPTION_LEN, is_iso_date


class LLMProvider(str, Enum):
    """Supported LLM providers."""
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    AZURE_OPENAI = "azure-openai"


PROVIDER_NAMES = [p.value for p in LLMProvider]

DEFAULT_MODELS = {
    LLMProvider.ANTHROPIC: "claude-3-5-haiku-20241022",
    LLMProvider.OPENAI: "gpt-4o-mini",
    LLMProvider.AZURE_OPENAI: "gpt-4o-mini",
}

# Suggestions below this confidence are ignored
MIN_CONFIDENCE = 0.3

PROMPT_TEMPLATE = """Analyze this receipt text (OCR output, may contain errors, often Hebrew).

{text}

Return ONLY a JSON object (no markdown, no explanation):
{{
  "description": "Short description of the expense in the receipt's language, at most {max_len} characters (e.g. vendor and what was bought)",
  "date": "Purchase date in YYYY-MM-DD format, or empty string if not printed",
  "confidence": 0.9,
  "reasoning": "Brief explanation"
}}"""

_clients = {}


def _get_client(provider: LLMProvider):
    """Get or create the provider client (lazy initialization)."""
    if provider not in _clients:
        if provider == LLMProvider.ANTHROPIC:
            import anthropic
            _clients[provider] = anthropic.Anthropic()  # Uses ANTHROPIC_API_KEY env var
        elif provider == LLMProvider.OPENAI:
            import openai
            _clients[provider] = openai.OpenAI()  # Uses OPENAI_API_KEY env var
        else:
            import openai
            _clients[provider] = openai.AzureOpenAI(
                api_key=os.getenv("AZURE_OPENAI_API_KEY"),
                api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                azure_endpoint=os.getenv("AZURE_OPENAI_ENDPOINT"),
            )
    return _clients[provider]


def _complete(provider: LLMProvider, prompt: str, model: str) -> str:
    client = _get_client(provider)
    if provider == LLMProvider.ANTHROPIC:
        response = client.messages.create(
            model=model,
            max_tokens=200,
            temperature=0.0,
            messages=[{"role": "user", "content": prompt}],
        )
        return response.content[0].text.strip()
    response = client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        max_tokens=200,
        temperature=0.0,
        response_format={"type": "json_object"},
    )
    return response.choices[0].message.content.strip()


def _strip_code_fence(text: str) -> str:
    if not text.startswith("```"):
        return text
    lines = [ln for ln in text.splitlines() if not ln.startswith("```")]
    return "\n".join(lines)


def empty_suggestion(reason: str) -> Dict:
    return {"description": "", "date": None, "confidence": 0.0, "reasoning": reason}


def parse_suggestion(response_text: str) -> Dict:
    """Validate a model response into a suggestion dict."""
    result = json.loads(_strip_code_fence(response_text))
    date = (result.get("date") or "").strip()
    return {
        "description": (result.get("description") or "").strip()[:MAX_DESCRIPTION_LEN],
        "date": date if is_iso_date(date) else None,
        "confidence": float(result.get("confidence", 0.5)),
        "reasoning": result.get("reasoning", ""),
    }


def suggest_fields(ocr_text: str, provider: Optional[str] = None,
                   model: Optional[str] = None) -> Dict:
    """
    Suggest description and date for a receipt.

    Args:
        ocr_text: Full OCR text from receipt
        provider: LLM provider name, None disables the call
        model: Model name (uses default for provider if not specified)

    Returns:
        Dict with keys: description, date (ISO or None), confidence, reasoning
    """
    if not provider:
        return empty_suggestion("LLM disabled")
    if not (ocr_text or "").strip():
        return empty_suggestion("No text to analyze")

    try:
        llm_provider = LLMProvider(provider)
        model = model or DEFAULT_MODELS[llm_provider]
        # Receipts are short; the first ~2000 chars hold everything useful
        prompt = PROMPT_TEMPLATE.format(text=ocr_text[:2000], max_len=MAX_DESCRIPTION_LEN)
        suggestion = parse_suggestion(_complete(llm_provider, prompt, model))
    except Exception as e:
        return empty_suggestion(f"LLM extraction failed: {e}")

    if suggestion["confidence"] < MIN_CONFIDENCE:
        return empty_suggestion(f"Low confidence ({suggestion['confidence']:.2f})")
    return suggestion
