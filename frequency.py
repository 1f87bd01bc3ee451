"""
Weight tables for the Huffman engine: character occurrence counts of a text.

Counting is associative and commutative, so a large text can be split into
chunks, counted in separate processes and merged back into one table.
"""

from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Union


def read_text(path: Union[str, Path], encoding: str = "utf-8") -> str:
    # no newline translation
    return Path(path).read_bytes().decode(encoding)


def count_frequencies(text: str) -> Counter:
    return Counter(text)


def merge_frequencies(partials: Iterable[Counter]) -> Counter:
    merged = Counter()
    for part in partials:
        merged.update(part)
    return merged


def split_chunks(text: str, parts: int, chunk_size: Optional[int] = None) -> List[str]:
    if not text:
        return []
    if chunk_size is None:
        chunk_size = -(-len(text) // max(1, parts)) # ceil
    chunk_size = max(1, chunk_size)
    return [text[i:i + chunk_size] for i in range(0, len(text), chunk_size)]


def count_frequencies_parallel(text: str, workers: int, chunk_size: Optional[int] = None) -> Counter:
    if workers <= 1:
        return count_frequencies(text)

    chunks = split_chunks(text, workers, chunk_size)
    if len(chunks) <= 1:
        return count_frequencies(text)

    with ProcessPoolExecutor(max_workers=workers) as pool:
        return merge_frequencies(pool.map(count_frequencies, chunks))
