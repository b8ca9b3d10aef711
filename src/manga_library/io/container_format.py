"""Chapter containers - one contract over folders, zip, rar and epub files.

A chapter is stored either as a folder of images or as an archive. Callers
classify a path with ``format_for`` and then use the returned container as a
context manager:

    with format_for(path) as container:
        entry = container.find_first_matching(predicate, key=natural_sort_key)
        if entry is not None:
            with container.open_entry(entry) as stream:
                ...

Archive-backed containers copy the archive to a private temporary file when
entered and delete it when left.
"""

import io
import logging
import zipfile
from abc import ABC, abstractmethod
from contextlib import ExitStack
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Type

import rarfile

from manga_library.core import UnknownFormatError

from .epub_file import EpubFile
from .temp_files import TempFileManager

logger = logging.getLogger(__name__)

SortKey = Callable[[str], Any]
EntryPredicate = Callable[["ContainerEntry"], bool]


@dataclass(frozen=True)
class ContainerEntry:
    """A single file or folder inside a container."""

    name: str
    is_directory: bool = False


class ContainerFormat(ABC):
    """Base class of the four chapter container variants."""

    kind: str = ""

    def __init__(self, path: Path, temp_files: Optional[TempFileManager] = None) -> None:
        self.path = Path(path)
        self.temp_files = temp_files or TempFileManager()
        self._stack: Optional[ExitStack] = None

    def __enter__(self) -> "ContainerFormat":
        stack = ExitStack()
        try:
            self._open(stack)
        except BaseException:
            stack.close()
            raise
        self._stack = stack
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        stack, self._stack = self._stack, None
        if stack is not None:
            stack.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.path)!r})"

    def _require_open(self) -> None:
        if self._stack is None:
            raise RuntimeError(f"{self!r} must be used inside a 'with' block")

    def _open(self, stack: ExitStack) -> None:
        """Acquire the resources backing this container."""

    @abstractmethod
    def list_entries(self) -> List[ContainerEntry]:
        """Entries in the container's own order."""

    @abstractmethod
    def open_entry(self, entry: ContainerEntry) -> BinaryIO:
        """Open an entry for reading. The caller closes the stream."""

    def list_entries_sorted(self, key: SortKey) -> List[ContainerEntry]:
        return sorted(self.list_entries(), key=lambda entry: key(entry.name))

    def find_first_matching(self, predicate: EntryPredicate, key: SortKey) -> Optional[ContainerEntry]:
        """Return the first sorted entry accepted by ``predicate``."""
        for entry in self.list_entries_sorted(key):
            if predicate(entry):
                return entry
        return None

    def read_named_entry(self, name: str) -> Optional[bytes]:
        """Bytes of the entry called exactly ``name``, or None if absent."""
        return None


class DirectoryFormat(ContainerFormat):
    """A chapter stored as a plain folder of images."""

    kind = "directory"

    def _open(self, stack: ExitStack) -> None:
        if not self.path.is_dir():
            raise NotADirectoryError(str(self.path))

    def list_entries(self) -> List[ContainerEntry]:
        self._require_open()
        return [ContainerEntry(name=p.name, is_directory=p.is_dir()) for p in self.path.iterdir()]

    def open_entry(self, entry: ContainerEntry) -> BinaryIO:
        self._require_open()
        return (self.path / entry.name).open("rb")


class ZipFormat(ContainerFormat):
    """A zip or cbz archive."""

    kind = "zip"

    def _open(self, stack: ExitStack) -> None:
        local_copy = stack.enter_context(self.temp_files.materialize(self.path))
        self._zip = stack.enter_context(zipfile.ZipFile(local_copy))

    def list_entries(self) -> List[ContainerEntry]:
        self._require_open()
        return [ContainerEntry(name=info.filename, is_directory=info.is_dir()) for info in self._zip.infolist()]

    def open_entry(self, entry: ContainerEntry) -> BinaryIO:
        self._require_open()
        return self._zip.open(entry.name)

    def read_named_entry(self, name: str) -> Optional[bytes]:
        self._require_open()
        try:
            info = self._zip.getinfo(name)
        except KeyError:
            return None
        return self._zip.read(info)


class RarFormat(ContainerFormat):
    """A rar or cbr archive."""

    kind = "rar"

    def _open(self, stack: ExitStack) -> None:
        local_copy = stack.enter_context(self.temp_files.materialize(self.path))
        self._rar = stack.enter_context(rarfile.RarFile(str(local_copy)))

    def list_entries(self) -> List[ContainerEntry]:
        self._require_open()
        return [ContainerEntry(name=info.filename, is_directory=info.is_dir()) for info in self._rar.infolist()]

    def open_entry(self, entry: ContainerEntry) -> BinaryIO:
        self._require_open()
        return self._rar.open(entry.name)

    def read_named_entry(self, name: str) -> Optional[bytes]:
        self._require_open()
        for info in self._rar.infolist():
            if info.filename == name:
                return self._rar.read(info)
        return None


class EpubFormat(ContainerFormat):
    """An epub file whose entries are the images of its pages.

    The page order comes from the book itself, so ``list_entries_sorted``
    ignores the sort key.
    """

    kind = "epub"

    def _open(self, stack: ExitStack) -> None:
        local_copy = stack.enter_context(self.temp_files.materialize(self.path))
        self.epub = EpubFile(local_copy)

    def list_entries(self) -> List[ContainerEntry]:
        self._require_open()
        return [ContainerEntry(name=href) for href in self.epub.get_images_from_pages()]

    def list_entries_sorted(self, key: SortKey) -> List[ContainerEntry]:
        return self.list_entries()

    def open_entry(self, entry: ContainerEntry) -> BinaryIO:
        self._require_open()
        return io.BytesIO(self.epub.read(entry.name))


ARCHIVE_FORMATS: Dict[str, Type[ContainerFormat]] = {
    "zip": ZipFormat,
    "cbz": ZipFormat,
    "rar": RarFormat,
    "cbr": RarFormat,
    "epub": EpubFormat,
}


def extension_of(path: Path) -> str:
    return Path(path).suffix.lower().lstrip(".")


def is_supported_archive(path: Path) -> bool:
    """True for files whose extension names a supported archive format."""
    path = Path(path)
    return path.is_file() and extension_of(path) in ARCHIVE_FORMATS


def format_for(path: Path, temp_files: Optional[TempFileManager] = None) -> ContainerFormat:
    """Classify a chapter path into its container variant.

    Raises:
        UnknownFormatError: If the path is neither a folder nor a supported archive.
    """
    path = Path(path)
    if path.is_dir():
        return DirectoryFormat(path, temp_files)
    format_class = ARCHIVE_FORMATS.get(extension_of(path)) if path.is_file() else None
    if format_class is None:
        raise UnknownFormatError(path.name)
    return format_class(path, temp_files)
