from dataclasses import dataclass, field
from typing import Optional, Tuple

from core.llm_defaults import (DEFAULT_BATCH_SIZE, DEFAULT_LANGUAGE_CODE,
                               DEFAULT_LLM_PROVIDER)
from utils.transport import RetryPolicy

# Words that show up in echoed prompts, examples and explanations rather than translations
DEFAULT_FRAGMENT_DENYLIST: Tuple[str, ...] = (
    "id",
    "vi",
    "text",
    "input",
    "output",
    "json",
    "array",
    "dịch",
    "translate",
    "translated",
    "translation",
    "response",
    "result",
    "example",
    "ví dụ",
    "format",
    "pattern",
    "error",
    "lỗi",
    "success",
    "thành công",
    "complete",
    "hoàn thành",
    "done",
    "xong",
)

DEFAULT_LINE_DENYLIST: Tuple[str, ...] = (
    "json",
    "array",
    "input",
    "output",
    "dịch",
    "translate",
    "translated",
    "translation",
)


@dataclass(frozen=True)
class TranslationConfig:
    """Configuration for text translation."""

    provider: str = DEFAULT_LLM_PROVIDER
    api_key: str = ""
    model_name: str = "gemini-2.0-flash"
    language_code: str = DEFAULT_LANGUAGE_CODE
    custom_prompt_path: Optional[str] = None
    batch_size: int = DEFAULT_BATCH_SIZE
    temperature: float = 0.2
    top_p: float = 0.9
    max_output_tokens: int = 8192
    timeout: float = 120
    line_break_placeholder: str = "[BR]"
    error_marker: str = "[TRANSLATION FAILED]"


@dataclass(frozen=True)
class ResponseParsingConfig:
    """Knobs for recovering translations from free-form model replies."""

    # Keys holding the translation when the model answers with objects
    translation_keys: Tuple[str, ...] = ("vi", "translation", "translated")
    fragment_denylist: Tuple[str, ...] = DEFAULT_FRAGMENT_DENYLIST
    fragment_min_length: int = 3  # exclusive
    fragment_max_length: int = 500  # exclusive
    fragment_overflow_factor: int = 2
    line_denylist: Tuple[str, ...] = DEFAULT_LINE_DENYLIST
    line_min_length: int = 5  # exclusive
    line_max_length: int = 200  # exclusive
    cleaned_line_min_length: int = 3  # exclusive
    raw_preview_chars: int = 500


@dataclass(frozen=True)
class OutputConfig:
    """Configuration for reading and writing subtitle files."""

    input_encoding: str = "utf-8-sig"
    output_encoding: str = "utf-8"
    filename_pattern: str = "{stem}.{language_code}.ass"


@dataclass(frozen=True)
class SubtitleTranslatorConfig:
    """Main configuration for the subtitle translation pipeline."""

    translation: TranslationConfig = field(default_factory=TranslationConfig)
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    parsing: ResponseParsingConfig = field(default_factory=ResponseParsingConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    verbose: bool = False
