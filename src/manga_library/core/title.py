"""Title entity - represents one manga series (a top-level library folder)."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from .metadata_records import ComicInfo, MangaDetails


class TitleStatus(IntEnum):
    """Publishing status of a title, with its ComicInfo spelling."""

    UNKNOWN = 0
    ONGOING = 1
    COMPLETED = 2
    LICENSED = 3
    PUBLISHING_FINISHED = 4
    CANCELLED = 5
    ON_HIATUS = 6

    @property
    def comic_info_value(self) -> str:
        return _STATUS_TO_COMIC_INFO[self]

    @classmethod
    def from_comic_info(cls, value: Optional[str]) -> "TitleStatus":
        """Map a ComicInfo publishing status string, unknown values included."""
        if value is None:
            return cls.UNKNOWN
        return _COMIC_INFO_TO_STATUS.get(value.strip(), cls.UNKNOWN)

    @classmethod
    def from_int(cls, value: int) -> "TitleStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


_STATUS_TO_COMIC_INFO = {
    TitleStatus.UNKNOWN: "Unknown",
    TitleStatus.ONGOING: "Ongoing",
    TitleStatus.COMPLETED: "Completed",
    TitleStatus.LICENSED: "Licensed",
    TitleStatus.PUBLISHING_FINISHED: "Publishing finished",
    TitleStatus.CANCELLED: "Cancelled",
    TitleStatus.ON_HIATUS: "On hiatus",
}
_COMIC_INFO_TO_STATUS = {value: status for status, value in _STATUS_TO_COMIC_INFO.items()}


def _join_distinct(values: List[Optional[str]], split: bool = False) -> List[str]:
    result: List[str] = []
    for value in values:
        if value is None:
            continue
        parts = value.split(", ") if split else [value]
        for part in parts:
            part = part.strip()
            if part and part not in result:
                result.append(part)
    return result


@dataclass
class Title:
    """A manga series stored as one top-level directory of the library.

    Attributes:
        url: Folder name; routing key for every file lookup of this title.
        title: Display title (defaults to the folder name).
        author: Writer credit.
        artist: Artist credits joined with ", ".
        description: Synopsis.
        genre: Genre and tag names.
        status: Publishing status.
        thumbnail_url: Reference to the stored cover image, if any.
    """

    url: str
    title: str
    author: Optional[str] = None
    artist: Optional[str] = None
    description: Optional[str] = None
    genre: List[str] = field(default_factory=list)
    status: TitleStatus = TitleStatus.UNKNOWN
    thumbnail_url: Optional[str] = None

    @classmethod
    def from_directory_name(cls, name: str) -> "Title":
        return cls(url=name, title=name)

    def copy_from_comic_info(self, comic_info: ComicInfo) -> None:
        """Copy every field the ComicInfo record carries onto this title."""
        if comic_info.series is not None:
            self.title = comic_info.series
        if comic_info.writer is not None:
            self.author = comic_info.writer

        genres = _join_distinct([comic_info.genre, comic_info.tags, comic_info.categories], split=True)
        if genres:
            self.genre = genres

        artists = _join_distinct(
            [
                comic_info.penciller,
                comic_info.inker,
                comic_info.colorist,
                comic_info.letterer,
                comic_info.cover_artist,
            ],
            split=True,
        )
        if artists:
            self.artist = ", ".join(artists)

        if comic_info.publishing_status is not None:
            self.status = TitleStatus.from_comic_info(comic_info.publishing_status)
        if comic_info.summary is not None:
            self.description = comic_info.summary

    def copy_from_details(self, details: MangaDetails) -> None:
        """Copy the fields present in a legacy details.json record."""
        if details.title is not None:
            self.title = details.title
        if details.author is not None:
            self.author = details.author
        if details.artist is not None:
            self.artist = details.artist
        if details.description is not None:
            self.description = details.description
        if details.genre is not None:
            self.genre = list(details.genre)
        if details.status is not None:
            self.status = TitleStatus.from_int(details.status)

    def to_comic_info(self) -> ComicInfo:
        """Build the canonical metadata record describing this title."""
        return ComicInfo(
            series=self.title,
            summary=self.description,
            writer=self.author,
            penciller=self.artist,
            genre=", ".join(self.genre) if self.genre else None,
            publishing_status=self.status.comic_info_value,
        )
