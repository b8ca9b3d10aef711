"""Image type detection from file content using Qt image readers.

Only the leading bytes of a stream are inspected; nothing is decoded.
"""

from typing import BinaryIO, Optional

from PySide6.QtCore import QBuffer, QByteArray, QCoreApplication, QIODevice
from PySide6.QtGui import QImageReader

# Formats accepted as page or cover images. Qt can also recognize text based
# formats (xpm, xbm, pbm) that are never manga pages.
SUPPORTED_IMAGE_FORMATS = frozenset({"jpeg", "jpg", "png", "gif", "webp", "bmp", "heif", "heic", "avif", "jxl"})


def ensure_qt_core_application() -> QCoreApplication:
    """Return the running Qt application, creating a headless one if needed.

    Qt loads its image format plugins through the application's library
    paths, so an instance must exist before the first sniff.
    """
    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    return app


class ImageSniffer:
    """Detects image streams by their signature, never by file name."""

    HEADER_SIZE = 64

    def __init__(self) -> None:
        self._app = ensure_qt_core_application()

    def image_format(self, header: bytes) -> Optional[str]:
        """Return the lower-case image format name for ``header``, or None."""
        if not header:
            return None
        buffer = QBuffer()
        buffer.setData(QByteArray(header))
        if not buffer.open(QIODevice.OpenModeFlag.ReadOnly):
            return None
        try:
            detected = QImageReader.imageFormat(buffer)
        finally:
            buffer.close()
        name = bytes(detected.data()).decode("ascii", errors="ignore").lower()
        return name if name in SUPPORTED_IMAGE_FORMATS else None

    def is_image(self, stream: BinaryIO) -> bool:
        """Read the leading bytes of ``stream`` and report whether it is an image."""
        return self.image_format(stream.read(self.HEADER_SIZE)) is not None
