from typing import List, Sequence, TypeVar

from utils.exceptions import ValidationError

T = TypeVar("T")


def chunk_texts(items: Sequence[T], batch_size: int) -> List[List[T]]:
    """
    Splits ``items`` into contiguous batches of at most ``batch_size``.

    Order is preserved and only the last batch may be shorter.
    """
    if batch_size < 1:
        raise ValidationError(f"Batch size must be a positive integer, got {batch_size}")
    return [list(items[i : i + batch_size]) for i in range(0, len(items), batch_size)]


def fit_to_batch(translations: List[str], batch_size: int, marker: str) -> List[str]:
    """Pads with ``marker`` or truncates so the result has exactly ``batch_size`` items."""
    if len(translations) < batch_size:
        return translations + [marker] * (batch_size - len(translations))
    return translations[:batch_size]
