"""Library Coordinator - Orchestrates title discovery, metadata and chapter listing."""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from manga_library.core import (
    Chapter,
    ChapterNotFoundError,
    InvalidChapterFormatError,
    Title,
    UnknownFormatError,
    UnsupportedOperationError,
)
from manga_library.io import ContainerFormat, LibraryFileSystem, TempFileManager, format_for
from manga_library.services import (
    ChapterListBuilder,
    ChapterRecognizer,
    CoverResolver,
    CoverStore,
    FileCoverCache,
    ImageSniffer,
    MetadataResolver,
)

logger = logging.getLogger(__name__)


class LibraryCoordinator:
    """Entry point of the local library engine.

    Responsibilities:
    - Discover titles (visible top-level folders) and attach stored covers
    - Resolve title metadata from ComicInfo.xml / details.json / archives
    - List the ordered chapters of a title, storing a fallback cover
    - Resolve the container backing a chapter

    Titles of one ``index_library`` call are processed on a title pool and
    their chapters on a separate chapter pool, so a title never waits on
    work queued behind itself. Call ``close`` (or use as a context manager)
    to stop the pools.
    """

    def __init__(
        self,
        file_system: LibraryFileSystem,
        cover_store: Optional[CoverStore] = None,
        recognizer: Optional[ChapterRecognizer] = None,
        temp_files: Optional[TempFileManager] = None,
        max_workers: Optional[int] = None,
    ):
        if file_system is None:
            raise ValueError("LibraryFileSystem must not be None")
        if max_workers is not None and max_workers < 1:
            raise ValueError("max_workers must be positive")

        self.file_system = file_system
        self.temp_files = temp_files or TempFileManager()

        image_sniffer = ImageSniffer()
        self.cover_store = cover_store or FileCoverCache(file_system, image_sniffer)

        self._title_pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="library-title")
        self._chapter_pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="library-chapter")

        self.metadata_resolver = MetadataResolver(file_system, temp_files=self.temp_files)
        self.chapter_list_builder = ChapterListBuilder(
            file_system,
            recognizer=recognizer,
            cover_resolver=CoverResolver(image_sniffer),
            cover_store=self.cover_store,
            temp_files=self.temp_files,
            executor=self._chapter_pool,
        )

    def __enter__(self) -> "LibraryCoordinator":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self._title_pool.shutdown(wait=True)
        self._chapter_pool.shutdown(wait=True)

    def discover_titles(self) -> List[Title]:
        """List every title of the library with its stored cover, by name."""
        seen = set()
        titles = []
        for directory in self.file_system.list_title_directories():
            if directory.name in seen:
                continue
            seen.add(directory.name)
            title = Title.from_directory_name(directory.name)
            self._attach_stored_cover(title)
            titles.append(title)
        return sorted(titles, key=lambda t: t.title.casefold())

    def resolve_title_metadata(self, title: Title) -> Title:
        """Fill ``title`` from local metadata files. Never raises for bad data."""
        self._attach_stored_cover(title)
        outcome = self.metadata_resolver.resolve(title)
        logger.debug("Metadata for %s: %s", title.url, outcome.state.value)
        return title

    def list_chapters(self, title: Title) -> List[Chapter]:
        """Return the chapters of ``title``, newest first."""
        return self.chapter_list_builder.build(title)

    def index_library(self, titles: Optional[List[Title]] = None) -> List[Tuple[Title, List[Chapter]]]:
        """Resolve metadata and chapters for many titles concurrently.

        Args:
            titles: Titles to index; defaults to ``discover_titles()``.

        Returns:
            (title, chapters) pairs in the order of ``titles``.
        """
        if titles is None:
            titles = self.discover_titles()
        return list(self._title_pool.map(self._index_title, titles))

    def get_format(self, chapter: Chapter) -> ContainerFormat:
        """Resolve the container backing ``chapter``.

        Raises:
            ChapterNotFoundError: If the chapter's file does not exist.
            InvalidChapterFormatError: If the file is not a supported container.
        """
        chapter_file = self.file_system.find_chapter_file(chapter.title_url, chapter.entry_name)
        if chapter_file is None:
            raise ChapterNotFoundError(chapter.url)
        try:
            return format_for(chapter_file, self.temp_files)
        except UnknownFormatError as e:
            raise InvalidChapterFormatError(chapter.url) from e

    def get_page_list(self, chapter: Chapter) -> List[str]:
        """Pages are read through ``get_format``; this source has no page list."""
        raise UnsupportedOperationError(f"Page list is not provided for local chapters: {chapter.url}")

    def _index_title(self, title: Title) -> Tuple[Title, List[Chapter]]:
        self.resolve_title_metadata(title)
        try:
            chapters = self.list_chapters(title)
        except Exception:
            logger.error("Error listing chapters of %s", title.url, exc_info=True)
            chapters = []
        return title, chapters

    def _attach_stored_cover(self, title: Title) -> None:
        try:
            cover = self.cover_store.find(title.url)
        except Exception:
            logger.error("Error looking up cover of %s", title.url, exc_info=True)
            return
        if cover is not None:
            title.thumbnail_url = cover.as_uri()
