"""I/O layer - library folders, chapter containers and metadata file codecs."""

from .comic_info_codec import COMIC_INFO_FILE, ComicInfoCodec
from .container_format import (
    ContainerEntry,
    ContainerFormat,
    DirectoryFormat,
    EpubFormat,
    RarFormat,
    ZipFormat,
    extension_of,
    format_for,
    is_supported_archive,
)
from .details_codec import CHAPTERS_FILE, LEGACY_DETAILS_FILE, DetailsCodec, parse_upload_date
from .epub_file import EpubFile, EpubMetadata
from .library_file_system import LibraryFileSystem, is_hidden, last_modified_millis
from .temp_files import TempFileManager, write_atomic

__all__ = [
    "CHAPTERS_FILE",
    "COMIC_INFO_FILE",
    "LEGACY_DETAILS_FILE",
    "ComicInfoCodec",
    "ContainerEntry",
    "ContainerFormat",
    "DetailsCodec",
    "DirectoryFormat",
    "EpubFile",
    "EpubFormat",
    "EpubMetadata",
    "LibraryFileSystem",
    "RarFormat",
    "TempFileManager",
    "ZipFormat",
    "extension_of",
    "format_for",
    "is_hidden",
    "is_supported_archive",
    "last_modified_millis",
    "parse_upload_date",
    "write_atomic",
]
