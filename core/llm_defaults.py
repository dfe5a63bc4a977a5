"""Provider-specific defaults and the target language table."""

from __future__ import annotations

from typing import Dict, Optional

# Canonical provider names used across the app
DEFAULT_LLM_PROVIDER = "Gemini"

_PROVIDER_SAMPLING_DEFAULTS: Dict[str, Dict[str, float | int]] = {
    "Gemini": {"temperature": 0.2, "top_p": 0.9, "max_output_tokens": 8192},
    "DeepSeek": {"temperature": 0.2, "top_p": 1.0, "max_output_tokens": 8192},
}

LANGUAGE_CODES: Dict[str, str] = {
    "Vietnamese": "VI",
    "English": "EN",
    "Chinese": "ZH",
    "Japanese": "JP",
    "Korean": "KR",
    "French": "FR",
    "German": "DE",
    "Spanish": "ES",
    "Russian": "RU",
}

DEFAULT_LANGUAGE_CODE = "VI"

# Suggested batch sizes; any positive size works
FIBONACCI_BATCH_SIZES = (1, 2, 3, 5, 8, 13, 21, 34, 55, 89, 144, 233, 377, 610)
DEFAULT_BATCH_SIZE = 89


def get_provider_sampling_defaults(provider: Optional[str]) -> Dict[str, float | int]:
    """Return a copy of the sampling defaults for the specified provider."""
    fallback = _PROVIDER_SAMPLING_DEFAULTS[DEFAULT_LLM_PROVIDER]
    if not provider:
        return fallback.copy()
    return _PROVIDER_SAMPLING_DEFAULTS.get(provider, fallback).copy()


def resolve_language_code(language: Optional[str]) -> str:
    """Accepts a language name ("Vietnamese") or code ("vi") and returns the code."""
    if not language:
        return DEFAULT_LANGUAGE_CODE
    for name, code in LANGUAGE_CODES.items():
        if language.strip().lower() in (name.lower(), code.lower()):
            return code
    return language.strip().upper()


def language_name_for(code: str) -> str:
    """Human-readable language name for a code, or the code itself if unknown."""
    for name, known_code in LANGUAGE_CODES.items():
        if known_code == (code or "").upper():
            return name
    return code


__all__ = [
    "DEFAULT_LLM_PROVIDER",
    "DEFAULT_LANGUAGE_CODE",
    "DEFAULT_BATCH_SIZE",
    "FIBONACCI_BATCH_SIZES",
    "LANGUAGE_CODES",
    "get_provider_sampling_defaults",
    "language_name_for",
    "resolve_language_code",
]
