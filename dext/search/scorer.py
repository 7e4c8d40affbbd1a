"""
Fuzzy Scorer - Relevance of a result title to the typed keyword.

score(candidate, query) is in [0, 1]:
  - 1.0 for a case-insensitive exact match
  - 0.0 when the query is empty, or its characters do not all appear
    in order in the candidate ("no match", kept by the ranker)
  - otherwise rapidfuzz's weighted ratio scaled to (0, 1]
"""

from typing import Optional

from rapidfuzz import fuzz
from rapidfuzz.distance import LCSseq


def score(candidate: Optional[str], query: Optional[str]) -> float:
    """Return the relevance of `candidate` to `query`. Pure."""
    candidate = (candidate or "").lower()
    query = (query or "").lower()

    if not query:
        return 0.0
    if candidate == query:
        return 1.0

    # Every query character must appear, in order, in the candidate
    if LCSseq.similarity(candidate, query) < len(query):
        return 0.0

    ratio = fuzz.WRatio(candidate, query) / 100
    return min(max(ratio, 0.01), 1.0)
