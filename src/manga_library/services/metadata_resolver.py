"""Title metadata resolution from the files in a title folder.

Sources, in precedence order:

1. ``ComicInfo.xml`` at the title's top level (canonical).
2. ``details.json`` (legacy). Applied, rewritten as ``ComicInfo.xml``, then
   deleted. Once migrated, the title resolves through state 1.
3. A ``ComicInfo.xml`` inside one of the chapter archives, copied to the top
   level. When no archive has one, a ``.noxml`` marker is created.
4. ``.noxml`` present: nothing to do, archives are not opened again.

A malformed top-level ``ComicInfo.xml`` is skipped and, when another source
replaces it, kept as ``ComicInfo.xml.bad``.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from manga_library.core import ComicInfo, MangaDetails, Title
from manga_library.io import (
    COMIC_INFO_FILE,
    LEGACY_DETAILS_FILE,
    ComicInfoCodec,
    DetailsCodec,
    LibraryFileSystem,
    TempFileManager,
    format_for,
    is_supported_archive,
    write_atomic,
)

logger = logging.getLogger(__name__)

NO_XML_FILE = ".noxml"
MALFORMED_SUFFIX = ".bad"


class MetadataState(Enum):
    """Which transition a resolution took."""

    COMIC_INFO = "comic_info"
    LEGACY_MIGRATED = "legacy_migrated"
    ARCHIVE_COPIED = "archive_copied"
    SENTINEL_WRITTEN = "sentinel_written"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class MetadataOutcome:
    """Result of resolving one title's metadata."""

    title: Title
    state: MetadataState
    source: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def applied(self) -> bool:
        return self.state in (MetadataState.COMIC_INFO, MetadataState.LEGACY_MIGRATED, MetadataState.ARCHIVE_COPIED)


class MetadataResolver:
    """Applies on-disk metadata to titles, migrating legacy files on the way."""

    def __init__(
        self,
        file_system: LibraryFileSystem,
        comic_info_codec: Optional[ComicInfoCodec] = None,
        details_codec: Optional[DetailsCodec] = None,
        temp_files: Optional[TempFileManager] = None,
    ) -> None:
        if file_system is None:
            raise ValueError("LibraryFileSystem must not be None")
        self.file_system = file_system
        self.comic_info_codec = comic_info_codec or ComicInfoCodec()
        self.details_codec = details_codec or DetailsCodec()
        self.temp_files = temp_files or TempFileManager()

    def resolve(self, title: Title) -> MetadataOutcome:
        """Update ``title`` in place from the best available metadata source.

        Never raises: errors are logged and reported as ``MetadataState.FAILED``,
        keeping whatever was applied before the failure.
        """
        try:
            return self._resolve(title)
        except Exception as e:
            logger.error("Error setting title details from local metadata for %s", title.title, exc_info=True)
            return MetadataOutcome(title=title, state=MetadataState.FAILED, error=e)

    def _resolve(self, title: Title) -> MetadataOutcome:
        title_dir = self.file_system.get_title_directory(title.url)
        if title_dir is None:
            raise FileNotFoundError(f"Title folder does not exist: {title.url}")

        entries = self.file_system.list_title_entries(title.url)
        comic_info_file = _find_file(entries, COMIC_INFO_FILE)
        no_xml_file = _find_file(entries, NO_XML_FILE)
        legacy_file = _find_file(entries, LEGACY_DETAILS_FILE)
        malformed: Optional[Path] = None

        if comic_info_file is not None:
            try:
                self._apply_comic_info(comic_info_file.read_bytes(), title)
            except ValueError as e:
                logger.warning("Ignoring malformed %s of %s: %s", COMIC_INFO_FILE, title.url, e)
                malformed = comic_info_file
            else:
                if no_xml_file is not None:
                    no_xml_file.unlink(missing_ok=True)
                return MetadataOutcome(title=title, state=MetadataState.COMIC_INFO, source=comic_info_file)

        if legacy_file is not None:
            try:
                details = self.details_codec.decode_details(legacy_file.read_bytes())
            except ValueError as e:
                logger.warning("Ignoring malformed %s of %s: %s", LEGACY_DETAILS_FILE, title.url, e)
            else:
                self._migrate_legacy(details, legacy_file, title_dir, title, malformed)
                return MetadataOutcome(title=title, state=MetadataState.LEGACY_MIGRATED, source=legacy_file)

        if no_xml_file is not None:
            return MetadataOutcome(title=title, state=MetadataState.SKIPPED)

        archives = [entry for entry in entries if is_supported_archive(entry)]
        copied, complete = self._copy_comic_info_from_archives(archives, title_dir, malformed)
        if copied is not None:
            title.copy_from_comic_info(copied)
            return MetadataOutcome(title=title, state=MetadataState.ARCHIVE_COPIED, source=title_dir / COMIC_INFO_FILE)
        if not complete:
            # Some archive could not be read; try again next time.
            return MetadataOutcome(title=title, state=MetadataState.SKIPPED)

        (title_dir / NO_XML_FILE).touch()
        logger.info("No %s found for %s, archives will not be scanned again", COMIC_INFO_FILE, title.url)
        return MetadataOutcome(title=title, state=MetadataState.SENTINEL_WRITTEN)

    def _apply_comic_info(self, data: bytes, title: Title) -> None:
        title.copy_from_comic_info(self.comic_info_codec.decode(data))

    def _migrate_legacy(
        self, details: MangaDetails, legacy_file: Path, title_dir: Path, title: Title, malformed: Optional[Path]
    ) -> None:
        title.copy_from_details(details)
        encoded = self.comic_info_codec.encode(title.to_comic_info())
        self._write_comic_info(title_dir, encoded, malformed)
        legacy_file.unlink()
        logger.info("Migrated %s of %s to %s", LEGACY_DETAILS_FILE, title.url, COMIC_INFO_FILE)

    def _copy_comic_info_from_archives(
        self, archives: List[Path], title_dir: Path, malformed: Optional[Path]
    ) -> Tuple[Optional[ComicInfo], bool]:
        """Copy the first valid ComicInfo.xml found inside ``archives`` to the title folder.

        Returns:
            The parsed record (None if no archive has one) and whether every
            archive could be inspected.
        """
        complete = True
        for archive in archives:
            container = format_for(archive, self.temp_files)
            if container.kind not in ("zip", "rar"):
                continue
            try:
                with container:
                    data = container.read_named_entry(COMIC_INFO_FILE)
                if data is None:
                    continue
                comic_info = self.comic_info_codec.decode(data)
            except ValueError as e:
                logger.warning("Ignoring malformed %s in %s: %s", COMIC_INFO_FILE, archive.name, e)
                continue
            except Exception:
                logger.error("Error reading %s", archive, exc_info=True)
                complete = False
                continue
            self._write_comic_info(title_dir, data, malformed)
            logger.info("Copied %s from %s", COMIC_INFO_FILE, archive.name)
            return comic_info, complete
        return None, complete

    def _write_comic_info(self, title_dir: Path, data: bytes, malformed: Optional[Path]) -> None:
        if malformed is not None and malformed.exists():
            kept = malformed.with_name(malformed.name + MALFORMED_SUFFIX)
            os.replace(malformed, kept)
            logger.warning("Moved malformed %s to %s", malformed, kept.name)
        write_atomic(title_dir / COMIC_INFO_FILE, data)


def _find_file(entries: List[Path], name: str) -> Optional[Path]:
    for entry in entries:
        if entry.name == name and entry.is_file():
            return entry
    return None
