import json
from typing import Any, Dict

from utils.endpoints.base import EndpointRequest
from utils.exceptions import ResponseFormatError, ValidationError

DEEPSEEK_API_URL = "https://api.deepseek.com/v1/chat/completions"


def build_deepseek_request(
    api_key: str,
    model_name: str,
    prompt_text: str,
    generation_config: Dict[str, Any],
) -> EndpointRequest:
    """Builds a chat-completions request with bearer authentication."""
    if not api_key:
        raise ValidationError("API key is required for DeepSeek endpoint")

    headers = {
        "Content-Type": "application/json",
        "Authorization": f"Bearer {api_key}",
    }
    payload = {
        "model": model_name,
        "messages": [{"role": "user", "content": prompt_text}],
        "temperature": generation_config.get("temperature", 0.2),
        "top_p": generation_config.get("top_p", 1.0),
        "max_tokens": generation_config.get("max_output_tokens", 8192),
    }
    return EndpointRequest(url=DEEPSEEK_API_URL, headers=headers, payload=payload)


def extract_deepseek_text(raw_body: str) -> str:
    """
    Returns the reply text at ``choices[0].message.content``.

    Raises:
        ResponseFormatError: If the body is not JSON or carries no choices.
    """
    try:
        result = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise ResponseFormatError(
            f"Error processing DeepSeek API response: {str(e)}"
        ) from e

    if not isinstance(result, dict):
        raise ResponseFormatError("DeepSeek API response is not a JSON object")

    choices = result.get("choices") or []
    if not choices:
        if "error" in result:
            error_msg = (result.get("error") or {}).get("message", "Unknown error")
            raise ResponseFormatError(f"DeepSeek API returned error: {error_msg}")
        raise ResponseFormatError("No choices in DeepSeek response")

    message = choices[0].get("message") or {}
    content = message.get("content")
    return content.strip() if content else ""
