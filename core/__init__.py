"""
AssTranslator Core Package

This package contains the core functionality for translating the dialogue of
Advanced SubStation Alpha (.ass) subtitles through an LLM API (Gemini or
DeepSeek), batch by batch, while keeping formatting tags intact.
"""

from .config import (OutputConfig, ResponseParsingConfig,
                     SubtitleTranslatorConfig, TranslationConfig)
from .pipeline import batch_translate_files, output_path_for
from .response_parsing import parse_translation_response
from .translator import SubtitleTranslator

__version__ = "1.0.0"
__version_info__ = (1, 0, 0)
__description__ = "Translate .ass subtitle dialogue with LLM APIs"
__all__ = [
    'SubtitleTranslator',
    'SubtitleTranslatorConfig',
    'TranslationConfig',
    'ResponseParsingConfig',
    'OutputConfig',
    'batch_translate_files',
    'output_path_for',
    'parse_translation_response',
]
