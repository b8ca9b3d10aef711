"""Chapter number recognition from chapter names."""

import re
from typing import Optional, Protocol

from manga_library.core import UNKNOWN_CHAPTER_NUMBER, to_single_precision

FORCED_CHAPTER_NUMBER = -2.0

_NUMBER_PATTERN = r"([0-9]+)(\.[0-9]+)?(\.?[a-z]+)?"

# Volume and season tokens ("vol.2", "v3", "season 1", "s2") are not chapter numbers.
_UNWANTED = re.compile(r"\b(?:v|ver|vol|version|volume|season|s)[^a-z]?[0-9]+")
# Keep "10 extra" together as "10extra" so the postfix is read as a sub-chapter.
_UNWANTED_WHITESPACE = re.compile(r"\s(?=extra|special|omake)")
# Number directly after "ch."
_BASIC = re.compile(r"(?<=ch\.) *" + _NUMBER_PATTERN)
_NUMBER = re.compile(_NUMBER_PATTERN)


class ChapterRecognizer(Protocol):
    """Policy turning a chapter name into a chapter number."""

    def parse_chapter_number(
        self, title_name: str, chapter_name: str, known_number: Optional[float] = None
    ) -> float:
        ...


class DefaultChapterRecognizer:
    """Pattern based recognizer for typical scanlation file names.

    Examples:
        "Title - Ch. 12.5 Part 2"  -> 12.5
        "Vol.2 Ch.7"               -> 7.0
        "Chapter 10 extra"         -> 10.99
        "Chapter 4a"               -> 4.1
        "Oneshot"                  -> -1.0
    """

    def parse_chapter_number(
        self, title_name: str, chapter_name: str, known_number: Optional[float] = None
    ) -> float:
        if known_number is not None and (known_number == FORCED_CHAPTER_NUMBER or known_number > 0):
            return to_single_precision(known_number)

        name = chapter_name.lower()
        if title_name:
            name = name.replace(title_name.lower(), "")
        name = name.strip().replace(",", ".").replace("-", ".")
        name = _UNWANTED_WHITESPACE.sub("", name)

        matches = list(_NUMBER.finditer(name))
        if not matches:
            return UNKNOWN_CHAPTER_NUMBER

        if len(matches) > 1:
            name = _UNWANTED.sub("", name)
            basic = _BASIC.search(name)
            if basic is not None:
                return to_single_precision(_number_from_match(basic))
            first = _NUMBER.search(name)
            if first is not None:
                return to_single_precision(_number_from_match(first))

        return to_single_precision(_number_from_match(matches[0]))


def _number_from_match(match: "re.Match[str]") -> float:
    initial = float(match.group(1))
    return initial + _sub_chapter(match.group(2), match.group(3))


def _sub_chapter(decimal: Optional[str], alpha: Optional[str]) -> float:
    if decimal:
        return float(decimal)
    if alpha:
        if "extra" in alpha:
            return 0.99
        if "omake" in alpha:
            return 0.98
        if "special" in alpha:
            return 0.97
        trimmed = alpha.lstrip(".")
        if len(trimmed) == 1:
            return _alpha_postfix(trimmed)
    return 0.0


def _alpha_postfix(letter: str) -> float:
    """"a" -> .1, "b" -> .2 ... letters past "i" carry no sub-chapter."""
    number = ord(letter) - (ord("a") - 1)
    if number >= 10:
        return 0.0
    return number / 10.0
