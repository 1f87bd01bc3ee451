"""Shared pytest fixtures for the Huffman tests."""

from __future__ import annotations

import random

import pytest


@pytest.fixture()
def scenario_weights() -> dict:
    """Weight table with a known code table under the leaf-first, ascending-symbol tie-break."""
    return {"c": 32, "d": 42, "e": 120, "k": 7, "l": 42, "m": 24, "u": 37, "z": 2}


@pytest.fixture()
def scenario_codes() -> dict:
    return {
        "e": "0",
        "u": "100",
        "d": "101",
        "l": "110",
        "c": "1110",
        "m": "11111",
        "z": "111100",
        "k": "111101",
    }


@pytest.fixture()
def sample_text() -> str:
    """A few lines of mixed prose, ~2 KB."""
    lines = [
        "The quick brown fox jumps over the lazy dog.",
        "Pack my box with five dozen liquor jugs!",
        "Ünïcödé cháracters survive the round trip: λ, π, 漢字.",
        "\ttabs, newlines and    runs of spaces too",
    ]
    return "\n".join(lines * 12)


@pytest.fixture()
def random_weights() -> list[dict]:
    """Twenty random weight tables with plenty of equal weights."""
    rng = random.Random(42)
    tables = []
    for _ in range(20):
        n = rng.randint(1, 40)
        symbols = rng.sample([chr(c) for c in range(33, 127)], n)
        tables.append({s: rng.randint(0, 6) for s in symbols})
    return tables
