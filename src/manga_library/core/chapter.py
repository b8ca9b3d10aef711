"""Chapter entity - one installment of a title (image folder or archive)."""

import struct
from dataclasses import dataclass
from typing import Optional

CHAPTER_NUMBER_EPSILON = 1e-4
UNKNOWN_CHAPTER_NUMBER = -1.0


def to_single_precision(value: float) -> float:
    """Round a double to the nearest single-precision float."""
    return struct.unpack("f", struct.pack("f", value))[0]


def chapter_numbers_equal(first: float, second: float) -> bool:
    """Compare chapter numbers with the tolerance used for parsed values."""
    return abs(first - second) < CHAPTER_NUMBER_EPSILON


@dataclass
class Chapter:
    """A chapter of a title.

    Attributes:
        url: "<title folder>/<entry name>", unique within the library.
        name: Display name (folder name or archive name without extension).
        chapter_number: Recognized number, UNKNOWN_CHAPTER_NUMBER when none.
        date_upload: Upload time as Unix epoch milliseconds.
        scanlator: Scanlation group, if known.
    """

    url: str
    name: str
    chapter_number: float = UNKNOWN_CHAPTER_NUMBER
    date_upload: int = 0
    scanlator: Optional[str] = None

    @property
    def title_url(self) -> str:
        return self.url.split("/", 1)[0]

    @property
    def entry_name(self) -> str:
        parts = self.url.split("/", 1)
        return parts[1] if len(parts) > 1 else ""
