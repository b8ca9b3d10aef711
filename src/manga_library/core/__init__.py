"""Domain layer - Pure entities representing a local manga library."""

from .chapter import (
    CHAPTER_NUMBER_EPSILON,
    UNKNOWN_CHAPTER_NUMBER,
    Chapter,
    chapter_numbers_equal,
    to_single_precision,
)
from .errors import (
    ChapterNotFoundError,
    InvalidChapterFormatError,
    LibraryError,
    UnknownFormatError,
    UnsupportedOperationError,
)
from .metadata_records import ChapterDetails, ComicInfo, MangaDetails
from .title import Title, TitleStatus

__all__ = [
    "CHAPTER_NUMBER_EPSILON",
    "UNKNOWN_CHAPTER_NUMBER",
    "Chapter",
    "ChapterDetails",
    "ChapterNotFoundError",
    "ComicInfo",
    "InvalidChapterFormatError",
    "LibraryError",
    "MangaDetails",
    "Title",
    "TitleStatus",
    "UnknownFormatError",
    "UnsupportedOperationError",
    "chapter_numbers_equal",
    "to_single_precision",
]
