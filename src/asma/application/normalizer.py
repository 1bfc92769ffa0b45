"""
Answer normalization.

Canonicalizes a free-text answer so that common transliteration variants of
the same name compare equal ("Rahmaan", "Rahman" and "Rahmen" all become
"rahman"). The mapping is lossy and only meant for comparison.
"""

import re
import unicodedata

_NON_LETTERS_RE = re.compile(r"[^a-z]")
_ARTICLE_RE = re.compile(r"^(ar|al)")
_VOWEL_RUN_RE = re.compile(r"([aeiou])\1+")
_REPEAT_RE = re.compile(r"(.)\1+")

# Applied in order, after vowel runs are collapsed.
_DIGRAPHS = (
    (re.compile(r"ae"), "a"),
    (re.compile(r"ou"), "u"),
    (re.compile(r"ai|ei"), "i"),
    (re.compile(r"kh"), "h"),
)


def strip_diacritics(text: str) -> str:
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(raw: str) -> str:
    """
    Canonical comparison form of ``raw``.

    The rewrite pipeline is repeated until the string stops changing, so
    normalize(normalize(s)) == normalize(s) holds for every input.
    """
    s = _NON_LETTERS_RE.sub("", strip_diacritics(raw).lower().strip())
    while True:
        collapsed = _collapse(s)
        if collapsed == s:
            return s
        s = collapsed


def _collapse(s: str) -> str:
    s = _ARTICLE_RE.sub("", s)
    s = _VOWEL_RUN_RE.sub(r"\1", s)

    for pattern, replacement in _DIGRAPHS:
        s = pattern.sub(replacement, s)

    if s.endswith("en"):
        s = s[:-2] + "an"

    return _REPEAT_RE.sub(r"\1", s)
