"""Cover resolution - first image of a chapter container."""

import logging
from dataclasses import dataclass
from typing import Optional

from manga_library.io import ContainerEntry, ContainerFormat

from .image_sniffer import ImageSniffer
from .natural_order import natural_sort_key

logger = logging.getLogger(__name__)


@dataclass
class CoverImage:
    """Image bytes taken from a chapter, with the entry they came from."""

    entry_name: str
    data: bytes


class CoverResolver:
    """Finds the first image of a container.

    Folders and archives are searched in natural name order, epub files in
    page order. Entries are recognized by content, so a misnamed ``.txt``
    holding a JPEG still counts and a ``.jpg`` holding text does not.
    """

    def __init__(self, image_sniffer: Optional[ImageSniffer] = None) -> None:
        self.image_sniffer = image_sniffer or ImageSniffer()

    def resolve(self, container: ContainerFormat) -> Optional[CoverImage]:
        """Return the first image of ``container``, or None.

        The container is entered here; failures to open it or read from it are
        logged and reported as no cover.
        """
        try:
            with container:
                entry = container.find_first_matching(
                    lambda e: self._is_image_entry(container, e),
                    key=natural_sort_key,
                )
                if entry is None:
                    logger.debug("No image found in %s", container.path)
                    return None
                with container.open_entry(entry) as stream:
                    return CoverImage(entry_name=entry.name, data=stream.read())
        except Exception:
            logger.error("Error resolving cover from %s", container.path, exc_info=True)
            return None

    def _is_image_entry(self, container: ContainerFormat, entry: ContainerEntry) -> bool:
        if entry.is_directory:
            return False
        try:
            with container.open_entry(entry) as stream:
                return self.image_sniffer.is_image(stream)
        except Exception as e:
            logger.debug("Skipping unreadable entry %s in %s: %s", entry.name, container.path, e)
            return False
