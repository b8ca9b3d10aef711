"""Shared fixtures: Qt runtime, real image bytes and library tree builders."""

import io
import zipfile
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple
from unittest.mock import patch

import pytest
from PySide6.QtCore import QBuffer, QIODevice
from PySide6.QtGui import QColor, QImage

from manga_library.services import ensure_qt_core_application


def _encode_image(fmt: str, color: str) -> bytes:
    image = QImage(8, 12, QImage.Format.Format_RGB32)
    image.fill(QColor(color))
    buffer = QBuffer()
    buffer.open(QIODevice.OpenModeFlag.WriteOnly)
    assert image.save(buffer, fmt)
    data = bytes(buffer.data().data())
    buffer.close()
    return data


@pytest.fixture(scope="session", autouse=True)
def qt_app():
    """Image format plugins need a Qt application instance."""
    return ensure_qt_core_application()


@pytest.fixture(scope="session")
def png_bytes(qt_app) -> bytes:
    return _encode_image("PNG", "red")


@pytest.fixture(scope="session")
def jpeg_bytes(qt_app) -> bytes:
    return _encode_image("JPG", "blue")


@pytest.fixture
def library_root(tmp_path) -> Path:
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def make_title(library_root):
    """Create a title folder and return its path."""

    def _make(name: str) -> Path:
        path = library_root / name
        path.mkdir(exist_ok=True)
        return path

    return _make


@pytest.fixture
def make_zip():
    """Write a zip archive from a {name: bytes} mapping."""

    def _make(path: Path, files: Dict[str, bytes]) -> Path:
        with zipfile.ZipFile(path, "w") as archive:
            for name, data in files.items():
                archive.writestr(name, data)
        return path

    return _make


CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="OEBPS/content.opf" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""

PAGE_XHTML = """<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html>
<html xmlns="http://www.w3.org/1999/xhtml">
<head><title>{page_id}</title></head>
<body><div><img src="{src}" alt="page"/></div></body>
</html>
"""


@pytest.fixture
def make_epub():
    """Write a minimal fixed-layout epub.

    ``pages`` is a sequence of (page id, image file name, image bytes) in
    reading order; ``metadata`` maps Dublin Core element names to values.
    """

    def _make(
        path: Path,
        pages: Iterable[Tuple[str, str, bytes]],
        metadata: Optional[Dict[str, str]] = None,
    ) -> Path:
        pages = list(pages)
        metadata = dict(metadata or {})
        metadata.setdefault("title", path.stem)
        metadata.setdefault("identifier", f"urn:uuid:{path.stem}")
        metadata.setdefault("language", "en")

        dc_lines = []
        for name, value in metadata.items():
            id_attr = ' id="uid"' if name == "identifier" else ""
            dc_lines.append(f"    <dc:{name}{id_attr}>{value}</dc:{name}>")
        dc_elements = "\n".join(dc_lines)
        manifest = []
        spine = []
        for page_id, image_name, _ in pages:
            manifest.append(f'    <item id="{page_id}" href="pages/{page_id}.xhtml" media-type="application/xhtml+xml"/>')
            manifest.append(
                f'    <item id="img-{page_id}" href="images/{image_name}" media-type="{_media_type(image_name)}"/>'
            )
            spine.append(f'    <itemref idref="{page_id}"/>')

        opf = (
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="uid">\n'
            '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
            f"{dc_elements}\n"
            "  </metadata>\n"
            "  <manifest>\n" + "\n".join(manifest) + "\n  </manifest>\n"
            "  <spine>\n" + "\n".join(spine) + "\n  </spine>\n"
            "</package>\n"
        )

        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
            archive.writestr("META-INF/container.xml", CONTAINER_XML)
            archive.writestr("OEBPS/content.opf", opf)
            for page_id, image_name, image_data in pages:
                archive.writestr(
                    f"OEBPS/pages/{page_id}.xhtml",
                    PAGE_XHTML.format(page_id=page_id, src=f"../images/{image_name}"),
                )
                archive.writestr(f"OEBPS/images/{image_name}", image_data)
        return path

    return _make


def _media_type(image_name: str) -> str:
    return "image/png" if image_name.endswith(".png") else "image/jpeg"


class FakeRarInfo:
    def __init__(self, filename: str):
        self.filename = filename

    def is_dir(self) -> bool:
        return self.filename.endswith("/")


class FakeRarFile:
    """In-memory stand-in for rarfile.RarFile (no unrar tool needed)."""

    def __init__(self, files: Dict[str, bytes]):
        self.files = files

    def __enter__(self) -> "FakeRarFile":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        pass

    def infolist(self):
        return [FakeRarInfo(name) for name in self.files]

    def open(self, name: str):
        return io.BytesIO(self.files[name])

    def read(self, info: FakeRarInfo) -> bytes:
        return self.files[info.filename]


@pytest.fixture
def make_rar():
    """Write a rar placeholder and serve its entries through a patched RarFile.

    The placeholder holds a key that the patched class reads back from the
    path it is given, so lookups also work on temporary copies.
    """
    archives: Dict[bytes, Dict[str, bytes]] = {}

    def _open(path):
        key = Path(path).read_bytes()
        if key not in archives:
            raise OSError(f"Not a rar archive: {path}")
        return FakeRarFile(archives[key])

    def _make(path: Path, files: Dict[str, bytes]) -> Path:
        key = f"rar-placeholder:{path}".encode()
        path.write_bytes(key)
        archives[key] = files
        return path

    with patch("manga_library.io.container_format.rarfile.RarFile", side_effect=_open):
        yield _make
