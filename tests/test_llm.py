"""Tests for LLM field suggestions (no network)."""

import json

import pytest

from expense_report.core import llm


def test_disabled_without_provider():
    result = llm.suggest_fields("סה\"כ 10.00", provider=None)
    assert result["description"] == ""
    assert result["date"] is None
    assert result["reasoning"] == "LLM disabled"


def test_parse_suggestion_handles_code_fence():
    text = "```json\n" + json.dumps({
        "description": "מונית מהשדה לתל אביב עם עצירה בדרך",
        "date": "2026-03-05",
        "confidence": 0.8,
        "reasoning": "header",
    }, ensure_ascii=False) + "\n```"
    result = llm.parse_suggestion(text)
    assert len(result["description"]) == 30
    assert result["date"] == "2026-03-05"
    assert result["confidence"] == pytest.approx(0.8)


def test_parse_suggestion_drops_bad_date():
    result = llm.parse_suggestion('{"description": "x", "date": "05/03/2026"}')
    assert result["date"] is None


def test_suggest_fields_uses_provider(monkeypatch):
    calls = []

    def fake_complete(provider, prompt, model):
        calls.append((provider, model))
        return '{"description": "קפה", "date": "2026-01-01", "confidence": 0.9, "reasoning": "ok"}'

    monkeypatch.setattr(llm, "_complete", fake_complete)
    result = llm.suggest_fields("receipt text", provider="anthropic")
    assert result["description"] == "קפה"
    assert calls == [(llm.LLMProvider.ANTHROPIC, llm.DEFAULT_MODELS[llm.LLMProvider.ANTHROPIC])]


def test_low_confidence_is_ignored(monkeypatch):
    monkeypatch.setattr(llm, "_complete", lambda *a: '{"description": "x", "confidence": 0.1}')
    result = llm.suggest_fields("receipt text", provider="openai", model="gpt-test")
    assert result["description"] == ""
    assert "Low confidence" in result["reasoning"]


def test_failure_yields_empty_suggestion(monkeypatch):
    def boom(*args):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(llm, "_complete", boom)
    result = llm.suggest_fields("receipt text", provider="openai")
    assert result["confidence"] == 0.0
    assert "rate limited" in result["reasoning"]


def test_unknown_provider_yields_empty_suggestion():
    result = llm.suggest_fields("receipt text", provider="mystery")
    assert result["description"] == ""
    assert result["reasoning"].startswith("LLM extraction failed")
