"""
Module: batch_helpers.py
Description: Utility functions for splitting work into provider-sized groups.

Key Components:
- chunk_list(): Split a sequence into contiguous chunks
- group_count(): Number of chunks chunk_list() will produce

Dependencies: typing, math
"""

import math
from typing import List, Sequence, TypeVar

T = TypeVar('T')


def chunk_list(items: Sequence[T], chunk_size: int) -> List[List[T]]:
    """
    Split a sequence into contiguous chunks of at most chunk_size items.

    Order is preserved and every item lands in exactly one chunk.

    Args:
        items: Sequence to split into chunks
        chunk_size: Maximum size of each chunk

    Returns:
        List of chunks, where each chunk is a list of items

    Raises:
        ValueError: If chunk_size is not positive

    Example:
        >>> chunk_list([1, 2, 3, 4, 5], 2)
        [[1, 2], [3, 4], [5]]
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    items = list(items)
    chunks = []
    for i in range(0, len(items), chunk_size):
        chunks.append(items[i:i + chunk_size])

    return chunks


def group_count(total: int, chunk_size: int) -> int:
    """
    Number of chunks needed for total items.

    Example:
        >>> group_count(12, 10)
        2
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return math.ceil(total / chunk_size)
