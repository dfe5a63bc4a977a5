from pathlib import Path
from typing import Iterable, List, Union

from core.config import SubtitleTranslatorConfig
from utils.endpoints import get_provider
from utils.exceptions import ValidationError

SUBTITLE_EXTENSIONS = (".ass",)


def validate_translator_config(config: SubtitleTranslatorConfig) -> None:
    """
    Validates the configuration before any network activity.

    Raises:
        ValidationError: If the provider is unknown, the API key or model is
                         missing, a numeric setting is out of range, or the
                         custom prompt file cannot be found.
    """
    translation_cfg = config.translation
    provider = get_provider(translation_cfg.provider)

    if not translation_cfg.api_key:
        raise ValidationError(
            f"{provider.name} API key is missing (set it or {provider.api_key_env_var})."
        )
    if not translation_cfg.model_name:
        raise ValidationError("Model name must not be empty.")
    if not translation_cfg.language_code:
        raise ValidationError("Target language must not be empty.")
    if not (isinstance(translation_cfg.batch_size, int) and translation_cfg.batch_size > 0):
        raise ValidationError("Batch size must be a positive integer.")
    if translation_cfg.timeout <= 0:
        raise ValidationError("Request timeout must be positive.")
    if not translation_cfg.line_break_placeholder:
        raise ValidationError("Line break placeholder must not be empty.")

    retry = config.retry
    if not (isinstance(retry.max_attempts, int) and retry.max_attempts > 0):
        raise ValidationError("Retry count must be a positive integer.")
    if retry.base_delay < 0:
        raise ValidationError("Retry delay must not be negative.")
    if retry.delay_ceiling < retry.base_delay:
        raise ValidationError("Maximum retry delay must not be below the retry delay.")

    if translation_cfg.custom_prompt_path and not Path(
        translation_cfg.custom_prompt_path
    ).is_file():
        raise ValidationError(
            f"Custom prompt file not found: {translation_cfg.custom_prompt_path}"
        )


def collect_subtitle_files(inputs: Iterable[Union[str, Path]]) -> List[Path]:
    """
    Expands the given files and directories into a de-duplicated file list.

    Directories contribute their ``.ass`` files (not recursive), sorted by name.

    Raises:
        FileNotFoundError: If an input does not exist.
    """
    files: List[Path] = []
    for item in inputs:
        path = Path(item)
        if path.is_dir():
            files.extend(
                sorted(
                    p
                    for p in path.iterdir()
                    if p.is_file() and p.suffix.lower() in SUBTITLE_EXTENSIONS
                )
            )
        elif path.is_file():
            files.append(path)
        else:
            raise FileNotFoundError(f"Input not found: {path}")

    unique: List[Path] = []
    seen = set()
    for path in files:
        key = path.resolve()
        if key not in seen:
            seen.add(key)
            unique.append(path)
    return unique
