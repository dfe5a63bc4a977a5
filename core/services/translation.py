from typing import List, Optional, Sequence

from core.config import SubtitleTranslatorConfig
from core.progress import ProgressReporter
from core.prompts import build_generation_config, build_translation_prompt
from core.response_parsing import NamedStrategy, parse_translation_response
from utils.endpoints import Provider
from utils.exceptions import EmptyResponseError
from utils.logging import log_message
from utils.transport import RetryingTransport


def call_translation_api_batch(
    texts: Sequence[str],
    config: SubtitleTranslatorConfig,
    provider: Provider,
    transport: RetryingTransport,
    instruction: str,
    reporter: Optional[ProgressReporter] = None,
    strategies: Optional[Sequence[NamedStrategy]] = None,
) -> List[str]:
    """
    Sends one batch of texts to the provider and recovers the translations.

    Args:
        texts (Sequence[str]): Dialogue texts, line breaks already replaced by the placeholder.
        config (SubtitleTranslatorConfig): Configuration object.
        provider (Provider): Selected provider (request builder + reply extractor).
        transport (RetryingTransport): Shared transport with the retry policy.
        instruction (str): Prompt text placed before the JSON array.
        reporter (ProgressReporter, optional): Status channel.
        strategies (Sequence[NamedStrategy], optional): Overrides the parse cascade.

    Returns:
        List[str]: Translations as recovered from the reply. The length may
                   differ from ``len(texts)``; the caller reconciles it.

    Raises:
        TransportError: If the HTTP call fails fatally or runs out of retries.
        ResponseFormatError: If the provider envelope cannot be read.
        EmptyResponseError: If the provider returned no reply text.
    """
    translation_cfg = config.translation
    prompt_text = build_translation_prompt(instruction, texts)
    request = provider.build_request(
        translation_cfg.api_key,
        translation_cfg.model_name,
        prompt_text,
        build_generation_config(translation_cfg),
    )

    log_message(
        f"Sending {len(texts)} texts to {provider.name} ({translation_cfg.model_name})",
        verbose=config.verbose,
    )
    raw_body = transport.send(
        request.url, request.headers, request.payload, label=f"{provider.name} API"
    )
    response_text = provider.extract_text(raw_body)
    if not response_text:
        raise EmptyResponseError(f"Empty response from {provider.name} API")

    log_message(f"Raw response:\n---\n{response_text}\n---", verbose=config.verbose)
    return parse_translation_response(
        response_text,
        len(texts),
        parsing=config.parsing,
        strategies=strategies,
        reporter=reporter,
    )
