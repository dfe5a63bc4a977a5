from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List


@dataclass(frozen=True)
class EndpointRequest:
    """A fully built provider request: where to POST and what to send."""

    url: str
    headers: Dict[str, str]
    payload: Dict[str, Any]


@dataclass(frozen=True)
class Provider:
    """
    One supported LLM provider.

    ``build_request(api_key, model_name, prompt_text, generation_config)``
    returns an ``EndpointRequest``; ``extract_text(raw_body)`` pulls the
    model's reply text out of the provider's JSON response.
    """

    name: str
    build_request: Callable[[str, str, str, Dict[str, Any]], EndpointRequest]
    extract_text: Callable[[str], str]
    default_model: str
    api_key_env_var: str
    models: List[str] = field(default_factory=list)
