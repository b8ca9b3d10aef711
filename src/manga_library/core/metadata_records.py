"""On-disk metadata records: canonical ComicInfo, legacy details and chapter overrides."""

from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ComicInfo:
    """Canonical per-title metadata stored as ComicInfo.xml.

    Only the elements this library reads or writes are modelled. Every field
    is optional; absent elements stay None so a write only emits what a read
    found.
    """

    title: Optional[str] = None
    series: Optional[str] = None
    number: Optional[str] = None
    summary: Optional[str] = None
    writer: Optional[str] = None
    penciller: Optional[str] = None
    inker: Optional[str] = None
    colorist: Optional[str] = None
    letterer: Optional[str] = None
    cover_artist: Optional[str] = None
    translator: Optional[str] = None
    genre: Optional[str] = None
    tags: Optional[str] = None
    web: Optional[str] = None
    publisher: Optional[str] = None
    categories: Optional[str] = None
    publishing_status: Optional[str] = None


@dataclass
class MangaDetails:
    """Legacy details.json record, read once then migrated to ComicInfo.xml."""

    title: Optional[str] = None
    author: Optional[str] = None
    artist: Optional[str] = None
    description: Optional[str] = None
    genre: Optional[List[str]] = None
    status: Optional[int] = None


@dataclass
class ChapterDetails:
    """One chapters.json override keyed by chapter number."""

    chapter_number: float
    name: Optional[str] = None
    date_upload: Optional[str] = None
    scanlator: Optional[str] = None
