"""Chapter listing for a title folder."""

import io
import logging
from concurrent.futures import Executor
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, List, Optional, TypeVar

from manga_library.core import UNKNOWN_CHAPTER_NUMBER, Chapter, ChapterDetails, Title, chapter_numbers_equal
from manga_library.io import (
    CHAPTERS_FILE,
    DetailsCodec,
    EpubFormat,
    EpubMetadata,
    LibraryFileSystem,
    TempFileManager,
    extension_of,
    format_for,
    is_hidden,
    is_supported_archive,
    last_modified_millis,
    parse_upload_date,
)

from .chapter_recognition import ChapterRecognizer, DefaultChapterRecognizer
from .cover_cache import CoverStore
from .cover_resolver import CoverResolver
from .natural_order import natural_sort_key

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class ChapterDraft:
    """A chapter plus the title-level fields its epub package carried."""

    chapter: Chapter
    epub_metadata: Optional[EpubMetadata] = None


def sort_chapters(chapters: Iterable[Chapter]) -> List[Chapter]:
    """Newest first: chapter number descending, then name in reverse natural order."""
    return sorted(
        chapters,
        key=lambda chapter: (chapter.chapter_number, natural_sort_key(chapter.name)),
        reverse=True,
    )


def find_override(chapter: Chapter, overrides: List[ChapterDetails]) -> Optional[ChapterDetails]:
    for override in overrides:
        if chapter_numbers_equal(override.chapter_number, chapter.chapter_number):
            return override
    return None


def apply_overrides(chapters: Iterable[Chapter], overrides: List[ChapterDetails]) -> None:
    """Overlay chapters.json records onto the chapters whose number matches."""
    for chapter in chapters:
        override = find_override(chapter, overrides)
        if override is None:
            continue
        if override.name is not None:
            chapter.name = override.name
        if override.date_upload is not None:
            try:
                chapter.date_upload = parse_upload_date(override.date_upload)
            except ValueError:
                logger.warning("Invalid upload date %r for %s", override.date_upload, chapter.url)
        if override.scanlator is not None:
            chapter.scanlator = override.scanlator


def parse_epub_date(value: str) -> int:
    """Parse an OPF date (ISO 8601, optionally with zone) into epoch milliseconds."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return int(datetime.fromisoformat(value).timestamp() * 1000)


class ChapterListBuilder:
    """Builds the ordered chapter list of a title.

    Chapters are folders and supported archives directly inside the title
    folder. Per-chapter work (epub metadata) may run on ``executor``; the
    result order never depends on completion order.
    """

    def __init__(
        self,
        file_system: LibraryFileSystem,
        recognizer: Optional[ChapterRecognizer] = None,
        cover_resolver: Optional[CoverResolver] = None,
        cover_store: Optional[CoverStore] = None,
        details_codec: Optional[DetailsCodec] = None,
        temp_files: Optional[TempFileManager] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        if file_system is None:
            raise ValueError("LibraryFileSystem must not be None")
        self.file_system = file_system
        self.recognizer = recognizer or DefaultChapterRecognizer()
        self.cover_resolver = cover_resolver or CoverResolver()
        self.cover_store = cover_store
        self.details_codec = details_codec or DetailsCodec()
        self.temp_files = temp_files or TempFileManager()
        self.executor = executor

    def build(self, title: Title) -> List[Chapter]:
        """List, enrich and sort the chapters of ``title``.

        Falls back to the last chapter's first image when the title has no
        cover yet, updating ``title.thumbnail_url``.
        """
        entries = self.file_system.list_title_entries(title.url)
        overrides = self._load_overrides(entries, title)
        chapter_files = [entry for entry in entries if is_chapter_entry(entry)]

        drafts = self._map(lambda entry: self._build_chapter(title, entry), chapter_files)

        for draft in drafts:
            metadata = draft.epub_metadata
            if metadata is None:
                continue
            if metadata.creator is not None:
                title.author = metadata.creator
            if metadata.description is not None:
                title.description = metadata.description

        chapters = [draft.chapter for draft in drafts]
        if overrides:
            apply_overrides(chapters, overrides)
        chapters = sort_chapters(chapters)

        if not title.thumbnail_url and chapters:
            self.update_cover(title, chapters[-1])

        return chapters

    def update_cover(self, title: Title, chapter: Chapter) -> Optional[Path]:
        """Store the first image of ``chapter`` as the cover of ``title``.

        Returns the stored cover path, or None when nothing was stored.
        """
        if self.cover_store is None:
            return None
        try:
            chapter_file = self.file_system.find_chapter_file(title.url, chapter.entry_name)
            if chapter_file is None:
                logger.warning("Chapter file for cover not found: %s", chapter.url)
                return None
            cover = self.cover_resolver.resolve(format_for(chapter_file, self.temp_files))
            if cover is None:
                return None
            stored = self.cover_store.update(title.url, io.BytesIO(cover.data))
        except Exception:
            logger.error("Error updating cover for %s", title.title, exc_info=True)
            return None
        title.thumbnail_url = stored.as_uri()
        return stored

    def _build_chapter(self, title: Title, entry: Path) -> ChapterDraft:
        name = entry.name if entry.is_dir() else entry.stem
        chapter = Chapter(url=f"{title.url}/{entry.name}", name=name)
        try:
            chapter.date_upload = last_modified_millis(entry)
        except OSError as e:
            logger.warning("Cannot read modification time of %s: %s", entry, e)
        try:
            chapter.chapter_number = self.recognizer.parse_chapter_number(title.title, name, 0.0)
        except Exception:
            logger.error("Error recognizing chapter number of %s", chapter.url, exc_info=True)
            chapter.chapter_number = UNKNOWN_CHAPTER_NUMBER

        draft = ChapterDraft(chapter=chapter)
        if entry.is_file() and extension_of(entry) == "epub":
            draft.epub_metadata = self._read_epub_metadata(entry)
            if draft.epub_metadata is not None:
                _fill_chapter_from_epub(chapter, draft.epub_metadata)
        return draft

    def _read_epub_metadata(self, entry: Path) -> Optional[EpubMetadata]:
        try:
            with EpubFormat(entry, self.temp_files) as container:
                return container.epub.get_metadata()
        except Exception:
            logger.error("Error reading epub metadata from %s", entry, exc_info=True)
            return None

    def _load_overrides(self, entries: List[Path], title: Title) -> List[ChapterDetails]:
        for entry in entries:
            if entry.name == CHAPTERS_FILE and entry.is_file():
                try:
                    return self.details_codec.decode_chapters(entry.read_bytes())
                except (OSError, ValueError) as e:
                    logger.warning("Ignoring %s of %s: %s", CHAPTERS_FILE, title.url, e)
                    return []
        return []

    def _map(self, fn: Callable[[T], R], items: List[T]) -> List[R]:
        if self.executor is None:
            return [fn(item) for item in items]
        return list(self.executor.map(fn, items))


def is_chapter_entry(entry: Path) -> bool:
    """Visible folders and supported archives are chapters."""
    if is_hidden(entry):
        return False
    return entry.is_dir() or is_supported_archive(entry)


def _fill_chapter_from_epub(chapter: Chapter, metadata: EpubMetadata) -> None:
    if metadata.title is not None:
        chapter.name = metadata.title
    if metadata.publisher is not None:
        chapter.scanlator = metadata.publisher
    elif metadata.creator is not None:
        chapter.scanlator = metadata.creator
    if metadata.date is not None:
        try:
            chapter.date_upload = parse_epub_date(metadata.date)
        except ValueError:
            logger.debug("Unparseable epub date %r for %s", metadata.date, chapter.url)
