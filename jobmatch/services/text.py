import re
from functools import lru_cache
from typing import Iterable


def normalize(text: str | None) -> str:
    """Lower-case ``text`` for substring search. ``None`` becomes ``""``."""
    if not text:
        return ""
    return text.lower()


def normalize_terms(terms: Iterable[str] | None) -> set[str]:
    """Lower-cased, stripped, duplicate-free set of non-empty terms."""
    if not terms:
        return set()
    return {t for t in (normalize(term).strip() for term in terms) if t}


@lru_cache(maxsize=1024)
def _phrase_pattern(phrase: str) -> re.Pattern:
    # A phrase must not be glued to a letter or digit on either side
    return re.compile(r"(?<![a-z0-9])" + re.escape(phrase) + r"(?![a-z0-9])")


def contains_phrase(normalized_text: str, phrase: str) -> bool:
    """True if the normalized ``phrase`` occurs contiguously in ``normalized_text``."""
    phrase = normalize(phrase).strip()
    if not phrase or not normalized_text:
        return False
    return _phrase_pattern(phrase).search(normalized_text) is not None
