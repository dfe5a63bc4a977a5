"""
Structure of Advanced SubStation Alpha (.ass) documents.

Only ``Dialogue:`` records are touched. Their text is the 10th
comma-separated field and may itself contain commas, so every split is
bounded to 10 parts. All other lines pass through untouched.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence, Union

DIALOGUE_PREFIX = "Dialogue:"
DIALOGUE_FIELD_COUNT = 10
LINE_BREAK = "\\N"


@dataclass
class ClassifiedLines:
    """Dialogue lines with their original positions, plus everything else."""

    dialogue_lines: List[str] = field(default_factory=list)
    dialogue_indices: List[int] = field(default_factory=list)
    other_lines: List[str] = field(default_factory=list)


def is_dialogue_line(line: str) -> bool:
    return line.startswith(DIALOGUE_PREFIX)


def classify_lines(lines: Sequence[str]) -> ClassifiedLines:
    """Partitions raw lines into dialogue records and all other lines."""
    classified = ClassifiedLines()
    for index, line in enumerate(lines):
        if is_dialogue_line(line):
            classified.dialogue_lines.append(line)
            classified.dialogue_indices.append(index)
        else:
            classified.other_lines.append(line)
    return classified


def _split_fields(line: str) -> List[str]:
    return line.split(",", DIALOGUE_FIELD_COUNT - 1)


def extract_dialogue_text(line: str) -> str:
    """Returns the text field of a dialogue line, or "" if the line is malformed."""
    parts = _split_fields(line)
    if len(parts) < DIALOGUE_FIELD_COUNT:
        return ""
    return parts[DIALOGUE_FIELD_COUNT - 1]


def replace_dialogue_text(line: str, new_text: str) -> str:
    """Swaps the text field for ``new_text``. Malformed lines come back unchanged."""
    parts = _split_fields(line)
    if len(parts) < DIALOGUE_FIELD_COUNT:
        return line
    parts[DIALOGUE_FIELD_COUNT - 1] = new_text
    return ",".join(parts)


def encode_line_breaks(text: str, placeholder: str = "[BR]") -> str:
    """Replaces ``\\N`` with a plain-text placeholder the model leaves alone."""
    return text.replace(LINE_BREAK, placeholder)


def decode_line_breaks(text: str, placeholder: str = "[BR]") -> str:
    return text.replace(placeholder, LINE_BREAK)


def merge_translated_lines(
    lines: Sequence[str],
    dialogue_indices: Sequence[int],
    translated_dialogues: Sequence[str],
) -> List[str]:
    """
    Puts translated dialogue lines back at their original positions.

    Args:
        lines (Sequence[str]): The source document's lines.
        dialogue_indices (Sequence[int]): Positions of the dialogue lines in ``lines``.
        translated_dialogues (Sequence[str]): Replacement lines, one per index, in order.

    Returns:
        List[str]: A document with the same number of lines as ``lines``.
    """
    if len(dialogue_indices) != len(translated_dialogues):
        raise ValueError(
            f"Got {len(translated_dialogues)} translated lines for "
            f"{len(dialogue_indices)} dialogue positions"
        )
    output = list(lines)
    for index, translated in zip(dialogue_indices, translated_dialogues):
        output[index] = translated
    return output


def read_subtitle_lines(
    path: Union[str, Path], encoding: str = "utf-8-sig"
) -> List[str]:
    """Reads a subtitle file as lines, accepting \\r\\n, \\r and \\n endings."""
    with open(path, "r", encoding=encoding, newline=None) as f:
        content = f.read()
    if not content:
        return []
    lines = content.split("\n")
    if content.endswith("\n"):
        lines.pop()
    return lines


def write_subtitle_lines(
    path: Union[str, Path], lines: Sequence[str], encoding: str = "utf-8"
) -> None:
    """Writes lines with a newline after each one, including the last."""
    with open(path, "w", encoding=encoding, newline="\n") as f:
        for line in lines:
            f.write(f"{line}\n")
