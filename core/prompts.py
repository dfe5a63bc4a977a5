import json
from pathlib import Path
from typing import Sequence

from core.config import TranslationConfig
from core.llm_defaults import language_name_for
from utils.exceptions import ValidationError


def _build_default_prompt(target_language: str, placeholder: str) -> str:
    return f"""
## ROLE
You are a professional subtitle translator.

## TASK
- Translate every element of the input array into {target_language}.
- Keep names of people, items and places consistent across lines.
- Pay attention to how speakers address each other so pronouns and forms of address stay consistent with age and relationship.

## CORE RULES
- Preserve every formatting TAG and PLACEHOLDER exactly as written, e.g. {{\\i1}}, {{\\pos(320,240)}}, [TAG1].
- Never translate, reorder or drop anything inside {{\\...}} or [...] markers.
- Write the line break {placeholder} exactly where it appears in the input; never output a raw \\N.

## OUTPUT FORMAT
- Input: a JSON array of strings ["text1", "text2", ...]
- Output: a JSON array of strings ["translation1", "translation2", ...]
- Return ONLY the JSON array. No explanations, no Markdown fences.
- The output array must contain exactly as many elements as the input array, in the same order.

## EXAMPLE
Input: ["Hello world", "How are you?"]
Output: ["<Hello world in {target_language}>", "<How are you? in {target_language}>"]
"""  # noqa


def load_prompt_template(config: TranslationConfig) -> str:
    """
    Returns the instruction text sent with every batch.

    A custom prompt file is used verbatim; otherwise the built-in prompt is
    rendered for the configured target language.
    """
    if config.custom_prompt_path:
        path = Path(config.custom_prompt_path)
        if not path.is_file():
            raise ValidationError(f"Custom prompt file not found: {path}")
        return path.read_text(encoding="utf-8-sig")
    return _build_default_prompt(
        language_name_for(config.language_code), config.line_break_placeholder
    )


def build_translation_prompt(instruction: str, texts: Sequence[str]) -> str:
    """Joins the instruction and the batch encoded as a JSON array of strings."""
    return f"{instruction}\n\n{json.dumps(list(texts), ensure_ascii=False)}"


def build_generation_config(config: TranslationConfig) -> dict:
    return {
        "temperature": config.temperature,
        "top_p": config.top_p,
        "max_output_tokens": config.max_output_tokens,
    }
