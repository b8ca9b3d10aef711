"""Cover storage for library titles.

Covers live inside each title folder as ``cover.<ext>``. Any existing
``cover.*`` file whose content is an image counts as the stored cover; new
covers are written to ``cover.jpg`` unless a cover file already exists, in
which case that file is replaced.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional, Protocol

from manga_library.io import LibraryFileSystem, write_atomic

from .image_sniffer import ImageSniffer

logger = logging.getLogger(__name__)


class CoverStore(Protocol):
    """Lookup and storage of title covers."""

    def find(self, title_id: str) -> Optional[Path]:
        ...

    def update(self, title_id: str, stream: BinaryIO) -> Optional[Path]:
        ...


class FileCoverCache:
    """Stores title covers next to the chapters.

    Fail-fast philosophy: ``update`` raises RuntimeError when the title folder
    is missing or the write fails.
    """

    DEFAULT_COVER_NAME = "cover.jpg"
    NO_MEDIA_FILE = ".nomedia"

    def __init__(self, file_system: LibraryFileSystem, image_sniffer: Optional[ImageSniffer] = None) -> None:
        if file_system is None:
            raise ValueError("LibraryFileSystem must not be None")
        self.file_system = file_system
        self.image_sniffer = image_sniffer or ImageSniffer()

    def find(self, title_id: str) -> Optional[Path]:
        """Return the stored cover of a title, or None."""
        title_dir = self.file_system.get_title_directory(title_id)
        if title_dir is None:
            return None
        for candidate in sorted(title_dir.iterdir(), key=lambda p: p.name):
            if not candidate.is_file() or candidate.stem != "cover":
                continue
            try:
                with candidate.open("rb") as stream:
                    if self.image_sniffer.is_image(stream):
                        return candidate
            except OSError as e:
                logger.warning("Unreadable cover candidate %s: %s", candidate, e)
        return None

    def update(self, title_id: str, stream: BinaryIO) -> Path:
        """Store the image read from ``stream`` as the cover of a title.

        Args:
            title_id: Title folder name.
            stream: Image data; read to the end but not closed.

        Returns:
            Path of the stored cover.

        Raises:
            RuntimeError: If the title folder is missing or the cover cannot be written.
        """
        title_dir = self.file_system.get_title_directory(title_id)
        if title_dir is None:
            raise RuntimeError(f"Title folder does not exist: {title_id}")

        target = self.find(title_id) or title_dir / self.DEFAULT_COVER_NAME
        try:
            write_atomic(target, stream.read())
            (title_dir / self.NO_MEDIA_FILE).touch(exist_ok=True)
        except OSError as e:
            raise RuntimeError(f"Failed to save cover: {target}") from e

        logger.info("Stored cover for %s at %s", title_id, target)
        return target
