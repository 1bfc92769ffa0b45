"""
Free-text answer matching.

Decides whether a typed answer counts as a correct recall of an item by
comparing canonical forms (see normalizer) exactly, then with a bounded
edit distance guarded against collapsing distinct short names.
"""

from asma.application.normalizer import normalize
from asma.domain.constants import CORRECT_ANSWER_QUALITY, INCORRECT_ANSWER_QUALITY
from asma.domain.models import Item

EXACT_ONLY_MAX_LEN = 3
STRICT_MAX_LEN = 5
MAX_DISTANCE = 1

# Short names that differ by a single letter from another name in the catalog.
_CONFUSABLE_SPELLINGS = (
    "ali", "alim", "aleem", "aalim", "aalee", "alee",
    "halim", "haleem", "haalim",
    "hakam", "haakam", "hakaam",
    "hakim", "hakeem", "haakim",
    "azim", "azeem", "aazim",
    "aziz", "azeez", "azees",
)  # fmt: skip

CONFUSABLE_SHORT_NAMES = frozenset(normalize(s) for s in _CONFUSABLE_SPELLINGS)


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit insert/delete/substitute costs."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    row = list(range(len(b) + 1))
    for i in range(1, len(a) + 1):
        prev = row[0]
        row[0] = i
        for j in range(1, len(b) + 1):
            current = row[j]
            cost = 0 if a[i - 1] == b[j - 1] else 1
            row[j] = min(row[j] + 1, row[j - 1] + 1, prev + cost)
            prev = current
    return row[len(b)]


def candidates_for(item: Item) -> list[str]:
    return [normalize(c) for c in (item.name, *item.aliases)]


def matches(answer: str, item: Item) -> bool:
    """
    Return True if ``answer`` is an accepted spelling of ``item``.

    Inputs of three canonical letters or fewer must match exactly. Inputs of
    up to five letters, or known confusable names, only fuzzy-match as an
    elongation of a candidate.
    """
    norm = normalize(answer)
    candidates = candidates_for(item)

    if norm in candidates:
        return True

    if len(norm) <= EXACT_ONLY_MAX_LEN:
        return False

    if len(norm) <= STRICT_MAX_LEN or norm in CONFUSABLE_SHORT_NAMES:
        return any(_strict_match(norm, c) for c in candidates)

    return any(levenshtein(norm, c) <= MAX_DISTANCE for c in candidates)


def _strict_match(norm: str, candidate: str) -> bool:
    distance = levenshtein(norm, candidate)
    if distance > MAX_DISTANCE:
        return False

    # Two confusable names: only a clear elongation counts.
    if norm in CONFUSABLE_SHORT_NAMES and candidate in CONFUSABLE_SHORT_NAMES:
        return len(norm) > len(candidate) + 1

    if len(norm) > len(candidate):
        return True

    # Near-equal short names are distinct names, not typos.
    if abs(len(norm) - len(candidate)) <= 1 and max(len(norm), len(candidate)) <= STRICT_MAX_LEN:
        return False

    return True


def quality_from_match(correct: bool) -> int:
    """Quality rating used when recall is judged from typed input."""
    return CORRECT_ANSWER_QUALITY if correct else INCORRECT_ANSWER_QUALITY
