"""
Recovering translated strings from free-form LLM replies.

Models are asked for a bare JSON array of strings but regularly wrap it in
prose or Markdown fences, answer with objects instead of strings, or drop
the JSON altogether. Each strategy below is a pure function
``(response_text, expected_count) -> Optional[List[str]]``; they are tried
from the most structured to the least and the first non-empty result wins.
"""

import json
import re
from dataclasses import dataclass
from functools import partial
from typing import Callable, List, Optional, Pattern, Sequence, Tuple

from core.config import ResponseParsingConfig
from core.progress import ProgressReporter

ParseStrategy = Callable[[str, int], Optional[List[str]]]

# A JSON string literal, escapes included
_JSON_STRING = r'"(?:[^"\\]|\\.)*"'
# Object body where strings may contain braces (ASS tags like {\i1})
_OBJECT_BODY = r'(?:[^{}"]|' + _JSON_STRING + r")*"

STRING_ARRAY_PATTERN = re.compile(
    r"\[\s*" + _JSON_STRING + r"(?:\s*,\s*" + _JSON_STRING + r")*\s*\]"
)
# Flat objects; translation keys are checked after decoding
OBJECT_ARRAY_PATTERN = re.compile(
    r"\[\s*\{" + _OBJECT_BODY + r"\}(?:\s*,\s*\{" + _OBJECT_BODY + r"\})*\s*\]"
)
QUOTED_FRAGMENT_PATTERN = re.compile(r'"((?:[^"\\]|\\.)*)"')
# Backslash pairs; only these stay JSON escapes, the rest are ASS override codes (\N, \b1, \fs20, \t)
_ESCAPE_PAIR = re.compile(r"\\(u[0-9a-fA-F]{4}|.)", re.DOTALL)
_JSON_ONLY_ESCAPES = ("\"", "\\", "/")
_NUMERAL = re.compile(r"^\d+$")
_CONSTANT = re.compile(r"^[A-Z_]+$")
_STRIP_CHARS = "\"'`[]{},"


@dataclass(frozen=True)
class NamedStrategy:
    name: str
    func: ParseStrategy


def _keep_override_codes(match) -> str:
    escaped = match.group(1)
    if escaped in _JSON_ONLY_ESCAPES or len(escaped) == 5:
        return match.group(0)
    return "\\\\" + escaped


def _loads_lenient(text: str):
    """json.loads that reads ``\\N`` or ``{\\b1}`` as literal text, escaped or not."""
    return json.loads(_ESCAPE_PAIR.sub(_keep_override_codes, text))


def _unescape_fragment(fragment: str) -> str:
    try:
        return _loads_lenient(f'"{fragment}"')
    except json.JSONDecodeError:
        return fragment


def _compile_denylist(words: Sequence[str]) -> Optional[Pattern[str]]:
    if not words:
        return None
    alternatives = "|".join(re.escape(word) for word in words)
    return re.compile(rf"(?<!\w)(?:{alternatives})(?!\w)", re.IGNORECASE)


def _is_string_list(value) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def parse_string_array(response_text: str, expected_count: int) -> Optional[List[str]]:
    """Strategy 1: the first ``["...", "..."]`` substring, parsed on its own."""
    match = STRING_ARRAY_PATTERN.search(response_text)
    if not match:
        return None
    try:
        parsed = _loads_lenient(match.group(0))
    except json.JSONDecodeError:
        return None
    if not _is_string_list(parsed) or not parsed:
        return None
    return parsed


def _project_translations(items, wanted: Sequence[str]) -> List[str]:
    texts = []
    for item in items:
        if not isinstance(item, dict):
            continue
        lowered = {str(k).lower(): v for k, v in item.items()}
        for key in wanted:
            value = lowered.get(key)
            if value is not None:
                texts.append(str(value))
                break
    return texts


def parse_object_array(
    response_text: str,
    expected_count: int,
    translation_keys: Sequence[str] = ("vi",),
) -> Optional[List[str]]:
    """Strategy 2: ``[{"id": "L0", "vi": "..."}, ...]`` projected onto the translation key."""
    if not translation_keys:
        return None
    wanted = [key.lower() for key in translation_keys]
    for match in OBJECT_ARRAY_PATTERN.finditer(response_text):
        try:
            parsed = _loads_lenient(match.group(0))
        except json.JSONDecodeError:
            continue
        texts = _project_translations(parsed, wanted)
        if texts:
            return texts
    return None


def _is_plausible_fragment(
    text: str, denylist: Optional[Pattern[str]], min_length: int, max_length: int
) -> bool:
    if not text.strip():
        return False
    if not (min_length < len(text) < max_length):
        return False
    if denylist and denylist.search(text):
        return False
    if text.startswith("http") or "://" in text or "@" in text:
        return False
    if _NUMERAL.match(text) or _CONSTANT.match(text):
        return False
    return True


def harvest_quoted_fragments(
    response_text: str,
    expected_count: int,
    denylist: Sequence[str] = (),
    min_length: int = 3,
    max_length: int = 500,
    overflow_factor: int = 2,
) -> Optional[List[str]]:
    """
    Strategy 3: every double-quoted substring that does not look like prompt echo.

    Accepted when 1..(overflow_factor * expected_count) fragments survive the
    filters; extras beyond ``expected_count`` are dropped, a short list is
    returned as-is for the caller to pad.
    """
    pattern = _compile_denylist(denylist)
    fragments = [
        _unescape_fragment(raw)
        for raw in QUOTED_FRAGMENT_PATTERN.findall(response_text)
    ]
    texts = [
        text
        for text in fragments
        if _is_plausible_fragment(text, pattern, min_length, max_length)
    ]
    if not texts or len(texts) > expected_count * overflow_factor:
        return None
    return texts[:expected_count]


def parse_whole_response(response_text: str, expected_count: int) -> Optional[List[str]]:
    """Strategy 4: the entire reply as a JSON array of strings."""
    try:
        parsed = _loads_lenient(response_text.strip())
    except json.JSONDecodeError:
        return None
    if not _is_string_list(parsed) or not parsed:
        return None
    return parsed


def _is_plausible_line(
    line: str, denylist: Optional[Pattern[str]], min_length: int, max_length: int
) -> bool:
    if not (min_length < len(line) < max_length):
        return False
    if "```" in line or "http" in line:
        return False
    if line.startswith(("[", "{", '"')):
        return False
    if denylist and denylist.search(line):
        return False
    if _NUMERAL.match(line) or _CONSTANT.match(line):
        return False
    return True


def harvest_lines(
    response_text: str,
    expected_count: int,
    denylist: Sequence[str] = (),
    min_length: int = 5,
    max_length: int = 200,
    cleaned_min_length: int = 3,
) -> Optional[List[str]]:
    """
    Strategy 5: plain lines of the reply that look like translated sentences.

    Only trusted when it yields no more lines than expected.
    """
    pattern = _compile_denylist(denylist)
    texts = []
    for raw_line in response_text.split("\n"):
        line = raw_line.strip()
        if not line or not _is_plausible_line(line, pattern, min_length, max_length):
            continue
        cleaned = line.strip(_STRIP_CHARS)
        if len(cleaned) > cleaned_min_length:
            texts.append(cleaned)
    if not texts or len(texts) > expected_count:
        return None
    return texts


def build_parse_strategies(
    parsing: Optional[ResponseParsingConfig] = None,
) -> List[NamedStrategy]:
    """The default cascade, in the order it must be tried."""
    parsing = parsing or ResponseParsingConfig()
    return [
        NamedStrategy("string array", parse_string_array),
        NamedStrategy(
            "object array",
            partial(parse_object_array, translation_keys=parsing.translation_keys),
        ),
        NamedStrategy(
            "quoted fragments",
            partial(
                harvest_quoted_fragments,
                denylist=parsing.fragment_denylist,
                min_length=parsing.fragment_min_length,
                max_length=parsing.fragment_max_length,
                overflow_factor=parsing.fragment_overflow_factor,
            ),
        ),
        NamedStrategy("whole response", parse_whole_response),
        NamedStrategy(
            "line harvest",
            partial(
                harvest_lines,
                denylist=parsing.line_denylist,
                min_length=parsing.line_min_length,
                max_length=parsing.line_max_length,
                cleaned_min_length=parsing.cleaned_line_min_length,
            ),
        ),
    ]


def first_successful(
    strategies: Sequence[NamedStrategy],
    response_text: str,
    expected_count: int,
    on_miss: Optional[Callable[[str], None]] = None,
) -> Tuple[Optional[str], List[str]]:
    """Runs strategies in order and returns (name, result) of the first non-empty one."""
    for strategy in strategies:
        result = strategy.func(response_text, expected_count)
        if result:
            return strategy.name, result
        if on_miss:
            on_miss(strategy.name)
    return None, []


def parse_translation_response(
    response_text: str,
    expected_count: int,
    parsing: Optional[ResponseParsingConfig] = None,
    strategies: Optional[Sequence[NamedStrategy]] = None,
    reporter: Optional[ProgressReporter] = None,
) -> List[str]:
    """
    Recovers an ordered list of translations from a raw model reply.

    Args:
        response_text (str): The model's complete reply.
        expected_count (int): Number of texts in the batch that was sent.
        parsing (ResponseParsingConfig, optional): Thresholds and denylists.
        strategies (Sequence[NamedStrategy], optional): Replaces the default cascade.
        reporter (ProgressReporter, optional): Receives fallback and diagnostic messages.

    Returns:
        List[str]: Best-effort translations; may be shorter or longer than
                   ``expected_count``, or empty when nothing usable was found.
    """
    parsing = parsing or ResponseParsingConfig()
    if strategies is None:
        strategies = build_parse_strategies(parsing)

    def _report(message: str, level: str = "info") -> None:
        if reporter:
            reporter.status(message, level=level)

    name, texts = first_successful(
        strategies,
        response_text or "",
        expected_count,
        on_miss=lambda missed: _report(f"Parse strategy '{missed}' found nothing"),
    )

    if texts:
        _report(
            f"Extracted {len(texts)} texts using '{name}' strategy (input: {expected_count})"
        )
        return texts

    preview = (response_text or "")[: parsing.raw_preview_chars]
    _report(f"Raw response: {preview}...", level="warning")
    _report(f"Full response length: {len(response_text or '')}", level="warning")
    _report("Could not parse response, returning empty array", level="warning")
    return []
