"""Splitting input records into fixed-size batches."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .model import Batch, InputRecord

DEFAULT_PAGE_SIZE = 10


def partition(records: Sequence[InputRecord], page_size: int = DEFAULT_PAGE_SIZE) -> list[Batch]:
    """Return ``records`` as consecutive batches of ``page_size``, the last one possibly shorter."""

    if page_size <= 0:
        raise ValueError(f"Page size must be positive, got {page_size}")
    return [
        tuple(records[start : start + page_size]) for start in range(0, len(records), page_size)
    ]
