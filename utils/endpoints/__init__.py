from typing import Dict

from utils.exceptions import ValidationError

from .base import EndpointRequest, Provider
from .deepseek import build_deepseek_request, extract_deepseek_text
from .google import build_gemini_request, extract_gemini_text

PROVIDERS: Dict[str, Provider] = {
    "Gemini": Provider(
        name="Gemini",
        build_request=build_gemini_request,
        extract_text=extract_gemini_text,
        default_model="gemini-2.0-flash",
        api_key_env_var="GOOGLE_API_KEY",
        models=[
            "gemini-1.5-flash",
            "gemini-1.5-pro",
            "gemini-2.0-flash",
            "gemini-2.0-pro",
        ],
    ),
    "DeepSeek": Provider(
        name="DeepSeek",
        build_request=build_deepseek_request,
        extract_text=extract_deepseek_text,
        default_model="deepseek-chat",
        api_key_env_var="DEEPSEEK_API_KEY",
        models=["deepseek-chat", "deepseek-reasoner"],
    ),
}


def get_provider(name: str) -> Provider:
    """Looks up a provider by name (case-insensitive)."""
    for key, provider in PROVIDERS.items():
        if key.lower() == (name or "").lower():
            return provider
    raise ValidationError(
        f"Unknown translation provider specified: {name} "
        f"(expected one of: {', '.join(PROVIDERS)})"
    )


__all__ = [
    "EndpointRequest",
    "Provider",
    "PROVIDERS",
    "get_provider",
    "build_gemini_request",
    "extract_gemini_text",
    "build_deepseek_request",
    "extract_deepseek_text",
]
