# ABOUTME: Arabic normalization for root-mode matching.
# ABOUTME: Strips tashkeel and tatweel and folds Alef, Yaa, Taa-Marbuta, and Hamza variants.

# Short vowels, tanween, shadda, sukun and the other combining marks, plus superscript Alef.
_DIACRITICS = [chr(code) for code in range(0x064B, 0x0660)] + ["ٰ"]

_REMOVED = [
    *_DIACRITICS,
    "ء",  # standalone Hamza
    "ـ",  # tatweel
]

_FOLDS = {
    "أ": "ا",  # Alef with Hamza above -> Alef
    "إ": "ا",  # Alef with Hamza below -> Alef
    "آ": "ا",  # Alef with Madda -> Alef
    "ٱ": "ا",  # Alef Wasla -> Alef
    "ى": "ي",  # Alef Maqsura -> Yaa
    "ئ": "ي",  # Yaa with Hamza -> Yaa
    "ة": "ه",  # Taa Marbuta -> Haa
    "ؤ": "و",  # Waw with Hamza -> Waw
}

# Every fold target is a plain letter that no rule touches, which keeps
# normalize_arabic idempotent.
_TABLE: dict[int, str | None] = {
    **{ord(src): dst for src, dst in _FOLDS.items()},
    **{ord(ch): None for ch in _REMOVED},
}


def normalize_arabic(text: str) -> str:
    """Return text with diacritics removed and letter variants unified."""
    return text.translate(_TABLE)


def normalize_with_offsets(text: str) -> tuple[str, list[int]]:
    """Normalize text and keep a map back into the original string.

    Every rule either drops a character or replaces it with exactly one
    character, so ``offsets[i]`` is the index in ``text`` of the character
    that produced position ``i`` of the normalized string.

    Returns:
        (normalized, offsets) with ``len(offsets) == len(normalized)``.
    """
    chars: list[str] = []
    offsets: list[int] = []
    for index, ch in enumerate(text):
        code = ord(ch)
        if code in _TABLE:
            mapped = _TABLE[code]
            if mapped is None:
                continue
            chars.append(mapped)
        else:
            chars.append(ch)
        offsets.append(index)
    return "".join(chars), offsets
