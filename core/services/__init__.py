"""
External service integration modules for the subtitle translator.

This subpackage contains modules for:
- Translation API calls to the supported LLM providers
"""

from .translation import call_translation_api_batch

__all__ = [
    "call_translation_api_batch",
]
