# ABOUTME: Static classification of books into sects for filtering search and downloads.
# ABOUTME: A fixed list of ids is Sunni; every other id defaults to Shia.

from enum import Enum


class Sect(str, Enum):
    """A sect filter value. ALL disables filtering."""

    ALL = "all"
    SHIA = "shia"
    SUNNI = "sunni"


SUNNI_BOOK_IDS: frozenset[str] = frozenset(
    {
        "59624",  # Gharib al-Hadith, Abu Ubayd
        "59622",  # Gharib al-Hadith, al-Khattabi
        "109591",  # Gharib al-Hadith, Ibn al-Jawzi
        "17077",  # Gharib al-Hadith, Ibn Qutayba
        "02384",  # al-Nihaya fi Gharib al-Hadith, Ibn al-Athir
        "00779",  # al-Fa'iq fi Gharib al-Hadith, al-Zamakhshari
        "25568",  # al-Majmu' al-Mughith, al-Madini
        "66642",  # Firdaws al-Akhbar, al-Daylami
        "01484",  # Sharh Nahj al-Balagha, Ibn Abi al-Hadid
        "124740",  # al-Rawd al-Nadir, al-Siyaghi
    }
)


def book_sect(book_id: str) -> Sect:
    """Classify a book id. Never returns Sect.ALL."""
    if book_id in SUNNI_BOOK_IDS:
        return Sect.SUNNI
    return Sect.SHIA


def matches_sect(book_id: str, sect: Sect) -> bool:
    """Check whether a book id passes a sect filter."""
    return sect == Sect.ALL or book_sect(book_id) == sect
