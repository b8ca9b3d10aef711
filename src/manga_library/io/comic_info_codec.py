"""ComicInfo.xml codec - the canonical on-disk title metadata."""

import xml.etree.ElementTree as ET
from dataclasses import fields
from typing import Dict, Tuple

from manga_library.core import ComicInfo

COMIC_INFO_FILE = "ComicInfo.xml"

TY_NAMESPACE = "http://www.w3.org/2001/XMLSchema"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"

# record field -> (element name, lives in the "ty" namespace)
_ELEMENTS: Dict[str, Tuple[str, bool]] = {
    "title": ("Title", False),
    "series": ("Series", False),
    "number": ("Number", False),
    "summary": ("Summary", False),
    "writer": ("Writer", False),
    "penciller": ("Penciller", False),
    "inker": ("Inker", False),
    "colorist": ("Colorist", False),
    "letterer": ("Letterer", False),
    "cover_artist": ("CoverArtist", False),
    "translator": ("Translator", False),
    "genre": ("Genre", False),
    "tags": ("Tags", False),
    "web": ("Web", False),
    "publisher": ("Publisher", False),
    "categories": ("Categories", True),
    "publishing_status": ("PublishingStatusTachiyomi", True),
}


class ComicInfoCodec:
    """Reads and writes ComicInfo.xml documents.

    Unknown elements are ignored on read. Namespaced elements are accepted
    with or without their namespace.
    """

    def decode(self, data: bytes) -> ComicInfo:
        """Parse a ComicInfo.xml document.

        Raises:
            ValueError: If the document is not well-formed or not a ComicInfo root.
        """
        try:
            root = ET.fromstring(data)
        except ET.ParseError as e:
            raise ValueError(f"Malformed ComicInfo.xml: {e}") from e
        if _local_name(root.tag) != "ComicInfo":
            raise ValueError(f"Unexpected root element: {root.tag}")

        values = {}
        for child in root:
            if not isinstance(child.tag, str):
                continue
            name = _local_name(child.tag)
            for field_name, (element, _) in _ELEMENTS.items():
                if element == name:
                    text = (child.text or "").strip()
                    values[field_name] = text or None
                    break
        return ComicInfo(**values)

    def encode(self, comic_info: ComicInfo) -> bytes:
        """Serialize the non-null fields of a record to a UTF-8 document."""
        root = ET.Element(
            "ComicInfo",
            {"xmlns:xsd": TY_NAMESPACE, "xmlns:xsi": XSI_NAMESPACE, "xmlns:ty": TY_NAMESPACE},
        )
        for f in fields(comic_info):
            value = getattr(comic_info, f.name)
            if value is None:
                continue
            element, namespaced = _ELEMENTS[f.name]
            child = ET.SubElement(root, f"ty:{element}" if namespaced else element)
            child.text = value
        ET.indent(root)
        return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]
