"""Scoped temporary copies and atomic file replacement."""

import logging
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class TempFileManager:
    """Creates private temporary copies of archives for random-access readers.

    Every materialization gets its own file, so concurrent readers of
    different (or the same) archives never share a path.
    """

    PREFIX = "manga-library-"

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory else None
        if self.directory is not None:
            self.directory.mkdir(parents=True, exist_ok=True)

    @contextmanager
    def materialize(self, source: Path) -> Iterator[Path]:
        """Copy ``source`` to a fresh temporary file for the duration of the block.

        Args:
            source: Archive to copy.

        Yields:
            Path of the temporary copy. It is removed when the block exits,
            whether normally or through an exception.
        """
        fd, name = tempfile.mkstemp(
            prefix=self.PREFIX,
            suffix=Path(source).suffix,
            dir=str(self.directory) if self.directory else None,
        )
        temp_path = Path(name)
        try:
            with os.fdopen(fd, "wb") as out, Path(source).open("rb") as src:
                shutil.copyfileobj(src, out)
            yield temp_path
        finally:
            try:
                temp_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning("Failed to remove temporary copy %s: %s", temp_path, e)


def write_atomic(target: Path, data: bytes) -> Path:
    """Write ``data`` next to ``target`` and move it into place.

    Readers either see the previous file or the complete new one.
    """
    target = Path(target)
    fd, name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
    temp_path = Path(name)
    try:
        with os.fdopen(fd, "wb") as out:
            out.write(data)
        os.replace(temp_path, target)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise
    return target
