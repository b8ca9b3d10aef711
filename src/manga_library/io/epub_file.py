"""EPUB access - reading-order images and package metadata."""

import posixpath
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup
from ebooklib import epub

warnings.filterwarnings("ignore", category=UserWarning, module="ebooklib.epub")
warnings.filterwarnings("ignore", category=FutureWarning, module="ebooklib.epub")


@dataclass
class EpubMetadata:
    """Dublin Core fields of an EPUB package document."""

    title: Optional[str] = None
    creator: Optional[str] = None
    publisher: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None


class EpubFile:
    """Read-only view over an EPUB file on local, seekable storage."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._book = epub.read_epub(str(self.path), options={"ignore_ncx": True})

    def get_metadata(self) -> EpubMetadata:
        date = self._first_dc("date") or self._meta_property("dcterms:modified")
        return EpubMetadata(
            title=self._first_dc("title"),
            creator=self._first_dc("creator"),
            publisher=self._first_dc("publisher"),
            description=self._first_dc("description"),
            date=date,
        )

    def get_page_documents(self) -> List[epub.EpubItem]:
        """Spine documents in reading order."""
        pages = []
        for entry in self._book.spine:
            idref = entry[0] if isinstance(entry, tuple) else entry
            item = self._book.get_item_with_id(idref)
            if item is not None:
                pages.append(item)
        return pages

    def get_images_from_pages(self) -> List[str]:
        """Image paths referenced by the spine pages, in reading order, deduplicated.

        Paths are relative to the package document, as used by ``read``.
        """
        images: List[str] = []
        for page in self.get_page_documents():
            content = page.content or b""
            soup = BeautifulSoup(content, "html.parser")
            base = posixpath.dirname(page.file_name)
            for tag in soup.find_all(["img", "image"]):
                src = tag.get("src") or tag.get("xlink:href") or tag.get("href")
                if not src:
                    continue
                href = unquote(urlsplit(src).path)
                resolved = posixpath.normpath(posixpath.join(base, href))
                if resolved not in images:
                    images.append(resolved)
        return images

    def read(self, href: str) -> bytes:
        """Return the raw bytes of a manifest item.

        Raises:
            KeyError: If no manifest item has this path.
        """
        item = self._book.get_item_with_href(href)
        if item is None:
            raise KeyError(href)
        return item.get_content()

    def _first_dc(self, name: str) -> Optional[str]:
        values = self._book.get_metadata("DC", name)
        for value, _attrs in values:
            if value and value.strip():
                return value.strip()
        return None

    def _meta_property(self, prop: str) -> Optional[str]:
        for namespace in self._book.metadata.values():
            for entries in namespace.values():
                for value, attrs in entries:
                    if attrs and attrs.get("property") == prop and value:
                        return value.strip()
        return None
