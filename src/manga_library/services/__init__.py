"""Services layer - recognition, resolution and listing logic."""

from manga_library.services.chapter_list_builder import (
    ChapterListBuilder,
    apply_overrides,
    is_chapter_entry,
    sort_chapters,
)
from manga_library.services.chapter_recognition import ChapterRecognizer, DefaultChapterRecognizer
from manga_library.services.cover_cache import CoverStore, FileCoverCache
from manga_library.services.cover_resolver import CoverImage, CoverResolver
from manga_library.services.image_sniffer import ImageSniffer, ensure_qt_core_application
from manga_library.services.metadata_resolver import (
    NO_XML_FILE,
    MetadataOutcome,
    MetadataResolver,
    MetadataState,
)
from manga_library.services.natural_order import compare_natural, natural_sort_key
from manga_library.services.settings_manager import SettingsManager

__all__ = [
    "NO_XML_FILE",
    "ChapterListBuilder",
    "ChapterRecognizer",
    "CoverImage",
    "CoverResolver",
    "CoverStore",
    "DefaultChapterRecognizer",
    "FileCoverCache",
    "ImageSniffer",
    "MetadataOutcome",
    "MetadataResolver",
    "MetadataState",
    "SettingsManager",
    "apply_overrides",
    "compare_natural",
    "ensure_qt_core_application",
    "is_chapter_entry",
    "natural_sort_key",
    "sort_chapters",
]
