# ABOUTME: Romanized-to-Arabic transliteration for search queries typed in Latin script.
# ABOUTME: Applies an explicit substitution list sorted longest-pattern-first.

import re
from collections.abc import Iterable

_ROMAN_RE = re.compile(r"[a-zA-Z]")

# Whole words and phrases first, then digraphs, then single letters. The
# order written here does not matter: TransliterationTable re-sorts by
# pattern length when it is built.
TRANSLITERATION_PAIRS: tuple[tuple[str, str], ...] = (
    # Phrases and common terms
    ("ahlulbayt", "اهل البيت"),
    ("ahlul", "اهل"),
    ("allah", "الله"),
    ("muhammad", "محمد"),
    ("mohammad", "محمد"),
    ("hussein", "حسين"),
    ("husain", "حسين"),
    ("hasan", "حسن"),
    ("hadith", "حديث"),
    ("quran", "قران"),
    ("rasul", "رسول"),
    ("salat", "صلاة"),
    ("zakat", "زكاة"),
    ("sawm", "صوم"),
    ("iman", "ايمان"),
    ("islam", "اسلام"),
    ("muslim", "مسلم"),
    ("deen", "دين"),
    ("kitab", "كتاب"),
    ("rabb", "رب"),
    ("jannah", "جنه"),
    ("jahannam", "جهنم"),
    ("shaytan", "شيطان"),
    ("malaika", "ملائكه"),
    ("sahabah", "صحابه"),
    ("sunnah", "سنه"),
    ("fatwa", "فتوى"),
    ("fiqh", "فقه"),
    ("masjid", "مسجد"),
    ("kabah", "كعبه"),
    ("makkah", "مكه"),
    ("madinah", "مدينه"),
    ("imam", "امام"),
    ("nabi", "نبي"),
    ("hajj", "حج"),
    ("bayt", "بيت"),
    ("ilm", "علم"),
    ("aql", "عقل"),
    ("nafs", "نفس"),
    ("ruh", "روح"),
    ("qalb", "قلب"),
    ("ali", "علي"),
    ("din", "دين"),
    ("ahl", "اهل"),
    # Digraphs
    ("th", "ث"),
    ("kh", "خ"),
    ("dh", "ذ"),
    ("sh", "ش"),
    ("gh", "غ"),
    ("aa", "ا"),
    ("ee", "ي"),
    ("ii", "ي"),
    ("oo", "و"),
    ("uu", "و"),
    ("al", "ال"),
    ("h2", "ه"),
    # Single letters
    ("a", "ا"),
    ("b", "ب"),
    ("t", "ت"),
    ("j", "ج"),
    ("h", "ح"),
    ("d", "د"),
    ("r", "ر"),
    ("z", "ز"),
    ("s", "س"),
    ("'", "ع"),
    ("f", "ف"),
    ("q", "ق"),
    ("k", "ك"),
    ("l", "ل"),
    ("m", "م"),
    ("n", "ن"),
    ("w", "و"),
    ("y", "ي"),
    ("i", "ي"),
    ("u", "و"),
    ("o", "و"),
    ("e", "ي"),
    # Letters without an Arabic counterpart map to the closest sound
    ("c", "ك"),
    ("g", "ج"),
    ("p", "ب"),
    ("v", "ف"),
    ("x", "كس"),
)


class TransliterationTable:
    """An ordered list of (pattern, replacement) pairs.

    Pairs are sorted once, by descending pattern length and then
    alphabetically, so multi-letter words are substituted before any of
    their letters can be. Patterns are lower-cased; input is lower-cased
    before substitution.
    """

    def __init__(self, pairs: Iterable[tuple[str, str]]) -> None:
        cleaned = [(pattern.lower(), replacement) for pattern, replacement in pairs if pattern]
        self._pairs: tuple[tuple[str, str], ...] = tuple(
            sorted(cleaned, key=lambda pair: (-len(pair[0]), pair[0]))
        )

    @property
    def pairs(self) -> tuple[tuple[str, str], ...]:
        """The substitution pairs in application order."""
        return self._pairs

    def apply(self, text: str) -> str:
        """Transliterate Latin text into Arabic script."""
        result = text.lower()
        for pattern, replacement in self._pairs:
            if pattern in result:
                result = result.replace(pattern, replacement)
        return result


DEFAULT_TABLE = TransliterationTable(TRANSLITERATION_PAIRS)


def transliterate(text: str, table: TransliterationTable = DEFAULT_TABLE) -> str:
    """Convert a romanized query into Arabic script using the default table."""
    return table.apply(text)


def contains_roman(text: str) -> bool:
    """Check whether text contains any Latin letters."""
    return _ROMAN_RE.search(text) is not None
