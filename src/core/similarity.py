"""Fuzzy address matching - Pure functions.

PHIVOLCS rewords place names between bulletins ("Brgy" vs "Barangay",
stray punctuation). These helpers normalize two location strings and
score how alike they are on a 0-100 scale.
"""

import re

from rapidfuzz.distance import Levenshtein


# Common Philippine address abbreviations
ADDRESS_ABBREVIATIONS = {
    "st": "street",
    "rd": "road",
    "ave": "avenue",
    "blk": "block",
    "brgy": "barangay",
    "ph": "phase",
    "subd": "subdivision",
}

_PUNCTUATION = re.compile(r"[^\w\s]")


def normalize_address(text: str) -> str:
    """Normalize an address for comparison.

    Pure function.

    Lowercases, turns punctuation into whitespace, expands known
    abbreviations and joins the tokens without separators.

    Args:
        text: Free-text address

    Returns:
        Normalized address string
    """
    tokens = _PUNCTUATION.sub(" ", text.lower()).split()
    return "".join(ADDRESS_ABBREVIATIONS.get(token, token) for token in tokens)


def levenshtein(a: str, b: str) -> int:
    """Compute the edit distance between two strings."""
    return Levenshtein.distance(a, b)


def similarity_percent(a: str, b: str) -> float:
    """Edit-distance similarity of two strings as a percentage.

    Pure function. Two empty strings are 100% similar.
    """
    if a == b:
        return 100.0

    longest = max(len(a), len(b))
    return (1 - levenshtein(a, b) / longest) * 100


def address_similarity(a: str, b: str) -> float:
    """Score how similar two addresses are after normalization.

    Pure function.

    Args:
        a: First address
        b: Second address

    Returns:
        Similarity from 0 to 100
    """
    return similarity_percent(normalize_address(a), normalize_address(b))
