"""Error taxonomy shared by the library layers."""


class LibraryError(Exception):
    """Base class for errors raised by the library engine."""


class UnknownFormatError(LibraryError):
    """A file is not a recognized chapter container."""

    def __init__(self, name: str):
        super().__init__(f"Unknown chapter container format: {name}")
        self.name = name


class ChapterNotFoundError(LibraryError):
    """The file backing a requested chapter does not exist."""

    def __init__(self, chapter_url: str):
        super().__init__(f"Chapter not found: {chapter_url}")
        self.chapter_url = chapter_url


class InvalidChapterFormatError(LibraryError):
    """A requested chapter exists but is not a supported container."""

    def __init__(self, chapter_url: str):
        super().__init__(f"Invalid chapter format: {chapter_url}")
        self.chapter_url = chapter_url


class UnsupportedOperationError(LibraryError, NotImplementedError):
    """This source does not provide the operation."""
