import json
from typing import Any, Dict

from utils.endpoints.base import EndpointRequest
from utils.exceptions import ResponseFormatError, ValidationError

GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model_name}:generateContent?key={api_key}"
)

SAFETY_SETTINGS = [
    {"category": "HARM_CATEGORY_HARASSMENT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_HATE_SPEECH", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_SEXUALLY_EXPLICIT", "threshold": "BLOCK_NONE"},
    {"category": "HARM_CATEGORY_DANGEROUS_CONTENT", "threshold": "BLOCK_NONE"},
]


def build_gemini_request(
    api_key: str,
    model_name: str,
    prompt_text: str,
    generation_config: Dict[str, Any],
) -> EndpointRequest:
    """
    Builds a generateContent request. The API key travels in the URL.

    Args:
        api_key (str): Google API key.
        model_name (str): Gemini model to use.
        prompt_text (str): Instruction followed by the JSON-encoded batch.
        generation_config (Dict[str, Any]): temperature, top_p and max_output_tokens.

    Returns:
        EndpointRequest: URL, headers and payload for the call.
    """
    if not api_key:
        raise ValidationError("API key is required for Gemini endpoint")

    url = GEMINI_API_URL.format(model_name=model_name, api_key=api_key)
    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt_text}]}],
        "generationConfig": {
            "temperature": generation_config.get("temperature", 0.2),
            "topP": generation_config.get("top_p", 0.9),
            "maxOutputTokens": generation_config.get("max_output_tokens", 8192),
        },
        "safetySettings": SAFETY_SETTINGS,
    }
    return EndpointRequest(
        url=url, headers={"Content-Type": "application/json"}, payload=payload
    )


def extract_gemini_text(raw_body: str) -> str:
    """
    Returns the reply text at ``candidates[0].content.parts[*].text``.

    Raises:
        ResponseFormatError: If the body is not JSON, the prompt was blocked,
                             or no candidate is present.
    """
    try:
        result = json.loads(raw_body)
    except json.JSONDecodeError as e:
        raise ResponseFormatError(
            f"Error processing Gemini API response: {str(e)}"
        ) from e

    if not isinstance(result, dict):
        raise ResponseFormatError("Gemini API response is not a JSON object")

    prompt_feedback = result.get("promptFeedback") or {}
    block_reason = prompt_feedback.get("blockReason")
    candidates = result.get("candidates") or []
    if not candidates:
        if block_reason:
            raise ResponseFormatError(f"Gemini blocked the prompt: {block_reason}")
        raise ResponseFormatError("No candidates in Gemini response")

    candidate = candidates[0]
    if candidate.get("finishReason") == "SAFETY":
        safety_ratings = candidate.get("safetyRatings", [])
        reason = "Unknown Safety Reason"
        if safety_ratings:
            reason = safety_ratings[0].get("category", reason)
        raise ResponseFormatError(f"Gemini blocked the response: {reason}")

    parts = (candidate.get("content") or {}).get("parts") or []
    # Thinking models can split the answer over several parts
    return "".join(
        part.get("text", "")
        for part in parts
        if isinstance(part, dict) and not part.get("thought")
    ).strip()
