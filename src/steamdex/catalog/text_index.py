"""Name normalization and match terms for catalog lookups.

A name is decomposed (NFKD), stripped of combining marks and casefolded.
Punctuation is dropped rather than turned into a separator, so "co-op" and
"coop" normalize to the same word; only whitespace separates words. The
compact form joins the words without separators and is what the full-text
index stores.
"""

from __future__ import annotations

import unicodedata
from typing import List, NamedTuple

# fts5 trigram tokens are three characters; shorter terms cannot use MATCH
MIN_INDEXED_TERM = 3


class IndexEntry(NamedTuple):
    record_id: int
    name_len: int
    compact: str


def normalize(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    kept = "".join(ch for ch in stripped.casefold() if ch.isalnum() or ch.isspace())
    return " ".join(kept.split())


def tokenize(text: str) -> List[str]:
    return normalize(text).split()


def compact(text: str) -> str:
    return "".join(tokenize(text))


def query_terms(query: str) -> List[str]:
    """Distinct query words in first-seen order."""
    seen: set[str] = set()
    terms: List[str] = []
    for token in tokenize(query):
        if token in seen:
            continue
        seen.add(token)
        terms.append(token)
    return terms


def fts_expression(terms: List[str]) -> str:
    """AND of quoted phrases for the terms long enough for the trigram index."""
    return " AND ".join(f'"{term}"' for term in terms if len(term) >= MIN_INDEXED_TERM)


def index_entry(record_id: int, name: str) -> IndexEntry:
    return IndexEntry(record_id=record_id, name_len=len(name), compact=compact(name))


__all__ = [
    "IndexEntry",
    "MIN_INDEXED_TERM",
    "compact",
    "fts_expression",
    "index_entry",
    "normalize",
    "query_terms",
    "tokenize",
]
