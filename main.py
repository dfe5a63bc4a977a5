import argparse
import os
import sys

from core.config import SubtitleTranslatorConfig, TranslationConfig
from core.llm_defaults import (DEFAULT_BATCH_SIZE, FIBONACCI_BATCH_SIZES,
                               LANGUAGE_CODES, get_provider_sampling_defaults,
                               resolve_language_code)
from core.pipeline import batch_translate_files
from core.progress import StatusEvent
from core.validation import collect_subtitle_files, validate_translator_config
from utils.endpoints import PROVIDERS
from utils.exceptions import ValidationError
from utils.logging import log_message
from utils.transport import RetryPolicy


def _print_status(event: StatusEvent) -> None:
    prefix = "" if event.level == "info" else f"[{event.level.upper()}] "
    log_message(f"{prefix}{event.message}", always_print=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Translate the dialogue of .ass subtitle files using an LLM API"
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        help="Subtitle files or directories containing .ass files",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for translated files (default: next to each input file)",
    )
    # --- Provider and API Key Arguments ---
    parser.add_argument(
        "--provider",
        type=str,
        default="Gemini",
        choices=list(PROVIDERS),
        help="LLM provider to use for translation",
    )
    parser.add_argument(
        "--api-key",
        type=str,
        default=None,
        help="API key (overrides GOOGLE_API_KEY for Gemini or DEEPSEEK_API_KEY for DeepSeek)",
    )
    parser.add_argument(
        "--model-name",
        type=str,
        default=None,
        help="Model name for the selected provider. If not provided, the provider's "
        "default is used. Known models: "
        + "; ".join(f"{name}: {', '.join(p.models)}" for name, p in PROVIDERS.items()),
    )
    parser.add_argument(
        "--target-language",
        type=str,
        default="Vietnamese",
        help=f"Target language name or code ({', '.join(LANGUAGE_CODES)})",
    )
    parser.add_argument(
        "--custom-prompt",
        type=str,
        default=None,
        help="Path to a text file whose contents replace the built-in prompt",
    )
    # --- Batching and Retry Arguments ---
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Dialogue lines per API request (suggested: "
        f"{', '.join(str(s) for s in FIBONACCI_BATCH_SIZES)})",
    )
    parser.add_argument(
        "--retry-count",
        type=int,
        default=100,
        help="Maximum attempts per request for network errors and HTTP 429/500/503",
    )
    parser.add_argument(
        "--retry-delay",
        type=float,
        default=2.0,
        help="Base retry delay in seconds; the n-th retry waits n times this value",
    )
    parser.add_argument(
        "--retry-delay-max",
        type=float,
        default=60.0,
        help="Upper bound for a single retry delay in seconds",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=120,
        help="HTTP request timeout in seconds",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    provider = PROVIDERS[args.provider]
    api_key = args.api_key or os.environ.get(provider.api_key_env_var, "")
    if not api_key:
        log_message(
            f"Error: {provider.name} API key not provided via --api-key or "
            f"{provider.api_key_env_var} environment variable.",
            always_print=True,
        )
        return 1

    model_name = args.model_name or provider.default_model
    if not args.model_name:
        log_message(f"Using default model for {provider.name}: {model_name}", verbose=True)
    elif model_name not in provider.models:
        log_message(
            f"Warning: '{model_name}' is not a known {provider.name} model "
            f"({', '.join(provider.models)}); sending it as given.",
            always_print=True,
        )

    sampling = get_provider_sampling_defaults(provider.name)
    config = SubtitleTranslatorConfig(
        translation=TranslationConfig(
            provider=provider.name,
            api_key=api_key,
            model_name=model_name,
            language_code=resolve_language_code(args.target_language),
            custom_prompt_path=args.custom_prompt,
            batch_size=args.batch_size,
            temperature=sampling["temperature"],
            top_p=sampling["top_p"],
            max_output_tokens=sampling["max_output_tokens"],
            timeout=args.timeout,
        ),
        retry=RetryPolicy(
            max_attempts=args.retry_count,
            base_delay=args.retry_delay,
            delay_ceiling=args.retry_delay_max,
        ),
        verbose=args.verbose,
    )

    try:
        validate_translator_config(config)
        input_files = collect_subtitle_files(args.inputs)
    except (ValidationError, FileNotFoundError) as e:
        log_message(f"Error: {e}", always_print=True)
        return 1

    if not input_files:
        log_message("Error: no .ass files found in the given inputs.", always_print=True)
        return 1

    results = batch_translate_files(
        input_files,
        config,
        output_dir=args.output_dir,
        status_callback=_print_status,
        document_progress_callback=lambda percent: log_message(
            f"Progress: {percent}%", verbose=args.verbose
        ),
    )

    total = len(input_files)
    log_message(f"Completed {results['success_count']}/{total} files", always_print=True)
    return 0 if results["error_count"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
