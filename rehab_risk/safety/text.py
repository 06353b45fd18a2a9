"""Symptom text normalization and keyword matching.

Matching is deliberately permissive. A keyword hits when the normalized symptom
contains it, or when any single word of the symptom contains the keyword or is
contained by it. That catches inflections and compounds ("vadsmärta",
"smärta i vaden") at the price of false positives, which is the right trade
for safety screening.
"""

import re
import unicodedata
from collections.abc import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def normalize(text: str) -> str:
    """Lower-case, strip diacritics, and join words with single underscores.

    >>> normalize("Ensidig  bensvullnad!")
    'ensidig_bensvullnad'
    >>> normalize("Öm vad")
    'om_vad'
    """
    decomposed = unicodedata.normalize("NFKD", text.lower())
    ascii_text = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return _NON_ALNUM.sub("_", ascii_text).strip("_")


def match_keywords(symptom: str, keywords: Iterable[str]) -> list[str]:
    """Return the keywords (as written in the table) that match ``symptom``."""
    normalized = normalize(symptom)
    if not normalized:
        return []
    words = [w for w in normalized.split("_") if w]

    matched = []
    for keyword in keywords:
        norm_kw = normalize(keyword)
        if not norm_kw:
            continue
        if norm_kw in normalized or any(norm_kw in w or w in norm_kw for w in words):
            matched.append(keyword)
    return matched
