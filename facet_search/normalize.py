from __future__ import annotations

"""
Text normalization utilities used across the facet search engine.

These helpers perform basic cleaning (HTML stripping, unicode
normalization, whitespace collapsing), diacritic folding for fuzzy
matching and URL slugs, and a language-aware collation key for
alphabetical sorting.  Keeping normalization logic centralized here
ensures titles, queries and slugs are treated the same way everywhere.
"""

import re
import unicodedata
from typing import Dict, Tuple

from bs4 import BeautifulSoup

from .config import COLLATION_LANGUAGE, MAX_INPUT_CHARS


# ---------------------------
# Basic helpers
# ---------------------------

_TAG_PATTERN = r"</?[a-zA-Z][a-zA-Z0-9]*(?:\s[^<>]*)?/?>"
_TAG_RE = re.compile(_TAG_PATTERN)
# "<" that does not open a tag
_STRAY_LT_RE = re.compile(r"<(?!" + _TAG_PATTERN[1:] + r")")


def clamp_text_length(text: str, max_chars: int = MAX_INPUT_CHARS) -> str:
    """
    Hard cap on input size so a pasted essay does not end up in the
    fuzzy matcher.
    """
    if not isinstance(text, str):
        text = str(text)
    if len(text) <= max_chars:
        return text
    return text[:max_chars]


def strip_html(raw: str) -> str:
    """
    Strip HTML tags using BeautifulSoup, then clean up whitespace and
    spacing around punctuation.  Text without a well-formed tag (such as
    the inequality "a<b") is returned untouched, and a "<" that opens no
    tag is kept as text.  If parsing fails, the input is returned
    unchanged to fail open rather than drop text.
    """
    if not raw:
        return ""
    # "a<b" or "x < y" is an inequality, not markup
    if not _TAG_RE.search(raw):
        return raw

    try:
        soup = BeautifulSoup(_STRAY_LT_RE.sub("&lt;", raw), "lxml")
        text = soup.get_text(" ", strip=True)
        text = normalize_whitespace(text)
        # Remove spaces before common punctuation marks
        text = re.sub(r"\s+([.,!?;:])", r"\1", text)
        return text
    except Exception:
        return raw


def normalize_unicode(text: str) -> str:
    """
    Normalize weird unicode (fancy quotes, decomposed accents) into NFC.
    """
    if not text:
        return ""
    return unicodedata.normalize("NFC", text)


def normalize_whitespace(text: str) -> str:
    """
    Collapse all whitespace runs into a single space and strip edges.
    """
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def basic_clean(text: str) -> str:
    """
    End-to-end cleaning used for catalog titles, descriptions and
    excerpts:

    - clamp length
    - strip HTML
    - normalize unicode
    - normalize whitespace
    """
    if text is None:
        return ""
    text = clamp_text_length(str(text))
    text = strip_html(text)
    text = normalize_unicode(text)
    text = normalize_whitespace(text)
    return text


def is_blank_query(query: str | None) -> bool:
    """True when a free-text query should be treated as "no query"."""
    return query is None or not str(query).strip()


# ---------------------------
# Diacritics & slugs
# ---------------------------

# Letters that do not decompose under NFKD
_SPECIAL_FOLDS = str.maketrans({
    "ł": "l",
    "Ł": "L",
    "đ": "d",
    "Đ": "D",
    "ø": "o",
    "Ø": "O",
})


def fold_diacritics(text: str) -> str:
    """
    Remove diacritics: 'Równania' -> 'Rownania', 'łódź' -> 'lodz'.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text.translate(_SPECIAL_FOLDS))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def generate_slug(name: str) -> str:
    """
    Build a URL-friendly slug: lowercase ASCII words joined by '-'.

    >>> generate_slug("Równania liniowe")
    'rownania-liniowe'
    """
    text = fold_diacritics(normalize_unicode(name or "")).lower()
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


# ---------------------------
# Collation
# ---------------------------

_LATIN_ALPHABET = "abcdefghijklmnopqrstuvwxyz"

# Languages whose accented letters are letters of their own, in order
COLLATION_ALPHABETS: Dict[str, str] = {
    "pl": "aąbcćdeęfghijklłmnńoópqrsśtuvwxyzźż",
    "de": _LATIN_ALPHABET,
    "en": _LATIN_ALPHABET,
    "fr": _LATIN_ALPHABET,
    "es": "abcdefghijklmnñopqrstuvwxyz",
    "it": _LATIN_ALPHABET,
}

CollationKey = Tuple[tuple, tuple, tuple]


def _primary_weight(ch: str, alphabet: str) -> tuple:
    if ch in alphabet:
        return (2, alphabet.index(ch), "")
    base = fold_diacritics(ch)
    if len(base) == 1 and base in alphabet:
        return (2, alphabet.index(base), "")
    if ch.isdigit():
        return (1, unicodedata.digit(ch, 0), "")
    if ch.isalpha():
        return (3, 0, ch)
    # whitespace and punctuation sort before digits
    return (0, 0, ch)


def collation_key(text: str, language: str = COLLATION_LANGUAGE) -> CollationKey:
    """
    Sort key approximating locale collation for ``language``.

    Comparison happens in three passes: base letters (in the language's
    alphabet, so Polish 'ł' sorts after 'l' rather than equal to it),
    then accents, then case with lowercase first.
    """
    alphabet = COLLATION_ALPHABETS.get((language or "").lower(), _LATIN_ALPHABET)
    text = normalize_unicode(text or "")
    folded = text.casefold()
    primary = tuple(_primary_weight(ch, alphabet) for ch in folded)
    secondary = tuple(
        0 if ch in alphabet or fold_diacritics(ch) == ch else 1 for ch in folded
    )
    tertiary = tuple(1 if ch.isupper() else 0 for ch in text)
    return primary, secondary, tertiary


if __name__ == "__main__":
    sample = "<p>Równania   kwadratowe &ndash; <b>łatwe</b> przykłady</p>"
    print("RAW:", sample)
    print("BASIC CLEAN:", basic_clean(sample))
    print("FOLDED:", fold_diacritics(basic_clean(sample)))
    print("SLUG:", generate_slug(basic_clean(sample)))
