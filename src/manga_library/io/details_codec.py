"""JSON codecs for details.json (legacy metadata) and chapters.json (overrides)."""

import json
from datetime import datetime
from typing import Any, List, Optional

from manga_library.core import ChapterDetails, MangaDetails

LEGACY_DETAILS_FILE = "details.json"
CHAPTERS_FILE = "chapters.json"

UPLOAD_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _optional_str(payload: dict, key: str) -> Optional[str]:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value


def _load(data: bytes) -> Any:
    try:
        return json.loads(data.decode("utf-8-sig"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Malformed JSON: {e}") from e


class DetailsCodec:
    """Decodes the JSON side files found in a title folder.

    Unknown keys are ignored; wrongly typed known keys raise ValueError.
    """

    def decode_details(self, data: bytes) -> MangaDetails:
        payload = _load(data)
        if not isinstance(payload, dict):
            raise ValueError("details.json must contain an object")

        genre = payload.get("genre")
        if genre is not None:
            if not isinstance(genre, list) or not all(isinstance(g, str) for g in genre):
                raise ValueError("'genre' must be a list of strings")

        status = payload.get("status")
        if status is not None and (isinstance(status, bool) or not isinstance(status, int)):
            raise ValueError("'status' must be an integer")

        return MangaDetails(
            title=_optional_str(payload, "title"),
            author=_optional_str(payload, "author"),
            artist=_optional_str(payload, "artist"),
            description=_optional_str(payload, "description"),
            genre=genre,
            status=status,
        )

    def decode_chapters(self, data: bytes) -> List[ChapterDetails]:
        payload = _load(data)
        if not isinstance(payload, list):
            raise ValueError("chapters.json must contain a list")

        records = []
        for item in payload:
            if not isinstance(item, dict):
                raise ValueError("chapters.json records must be objects")
            number = item.get("chapter_number")
            if isinstance(number, bool) or not isinstance(number, (int, float)):
                raise ValueError("'chapter_number' must be a number")
            records.append(
                ChapterDetails(
                    chapter_number=float(number),
                    name=_optional_str(item, "name"),
                    date_upload=_optional_str(item, "date_upload"),
                    scanlator=_optional_str(item, "scanlator"),
                )
            )
        return records


def parse_upload_date(value: str) -> int:
    """Parse a "yyyy-MM-ddTHH:mm:ss" local date-time into epoch milliseconds.

    Anything after the seconds field is ignored.

    Raises:
        ValueError: If the leading part does not match the format.
    """
    parsed = datetime.strptime(value.strip()[:19], UPLOAD_DATE_FORMAT)
    return int(parsed.timestamp() * 1000)
