"""File system access for the library base directory."""

from pathlib import Path
from typing import List, Optional


def is_hidden(path: Path) -> bool:
    return path.name.startswith(".")


def last_modified_millis(path: Path) -> int:
    """Modification time of ``path`` as Unix epoch milliseconds."""
    return int(Path(path).stat().st_mtime * 1000)


class LibraryFileSystem:
    """Resolves titles and chapter files below the library base directory.

    Layout:
        <base>/<title folder>/<chapter folder or archive>
    """

    def __init__(self, base_directory: Path) -> None:
        if base_directory is None:
            raise ValueError("Library base directory required")
        self.base_directory = Path(base_directory).absolute()

    def get_base_directory(self) -> Optional[Path]:
        return self.base_directory if self.base_directory.is_dir() else None

    def list_title_directories(self) -> List[Path]:
        """List the visible title folders, sorted by name."""
        base = self.get_base_directory()
        if base is None:
            return []
        return sorted(
            (p for p in base.iterdir() if p.is_dir() and not is_hidden(p)),
            key=lambda p: p.name,
        )

    def get_title_directory(self, title_id: str) -> Optional[Path]:
        if not title_id or "/" in title_id or "\\" in title_id or title_id in (".", ".."):
            return None
        path = self.base_directory / title_id
        return path if path.is_dir() else None

    def list_title_entries(self, title_id: str) -> List[Path]:
        """List every file and folder directly inside a title folder."""
        title_dir = self.get_title_directory(title_id)
        if title_dir is None:
            return []
        return sorted(title_dir.iterdir(), key=lambda p: p.name)

    def find_chapter_file(self, title_id: str, entry_name: str) -> Optional[Path]:
        title_dir = self.get_title_directory(title_id)
        if title_dir is None or not entry_name or "/" in entry_name or entry_name in (".", ".."):
            return None
        path = title_dir / entry_name
        return path if path.exists() else None
