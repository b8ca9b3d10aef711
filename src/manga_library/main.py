"""Command line entry point: print the titles and chapters of a local library."""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from manga_library.coordinators import LibraryCoordinator
from manga_library.io import LibraryFileSystem, TempFileManager
from manga_library.services import SettingsManager


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manga-library", description=__doc__)
    parser.add_argument("library", nargs="?", type=Path, help="library base directory (default: MANGA_LIBRARY_ROOT)")
    parser.add_argument("--title", help="only index this title folder")
    parser.add_argument("--workers", type=int, help="worker pool size (default: MANGA_LIBRARY_WORKERS or CPU count)")
    parser.add_argument("--log-level", help="logging level (default: MANGA_LIBRARY_LOG_LEVEL or INFO)")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Bootstrap the engine following the Composition Root pattern.
    This is the only place that knows how to instantiate and wire all components.
    """
    args = build_parser().parse_args(argv)

    # 1. Configuration
    settings = SettingsManager(project_root=Path.cwd())
    configure_logging(args.log_level or settings.get_log_level())

    library_root = args.library or settings.get_library_root()
    if library_root is None:
        print("No library directory given and MANGA_LIBRARY_ROOT is not set", file=sys.stderr)
        return 2
    if not library_root.is_dir():
        print(f"Library directory does not exist: {library_root}", file=sys.stderr)
        return 2

    # 2. Infrastructure
    file_system = LibraryFileSystem(library_root)
    temp_files = TempFileManager(settings.get_temp_directory())

    # 3. Engine
    with LibraryCoordinator(
        file_system,
        temp_files=temp_files,
        max_workers=args.workers or settings.get_max_workers(),
    ) as coordinator:
        titles = coordinator.discover_titles()
        if args.title:
            titles = [t for t in titles if t.url == args.title]
            if not titles:
                print(f"Title not found: {args.title}", file=sys.stderr)
                return 1

        for title, chapters in coordinator.index_library(titles):
            print(f"{title.title} [{title.url}]")
            if title.author:
                print(f"  author: {title.author}")
            if title.thumbnail_url:
                print(f"  cover: {title.thumbnail_url}")
            for chapter in chapters:
                uploaded = datetime.fromtimestamp(chapter.date_upload / 1000).isoformat(timespec="seconds")
                scanlator = f" ({chapter.scanlator})" if chapter.scanlator else ""
                print(f"  {chapter.chapter_number:g}\t{chapter.name}{scanlator}\t{uploaded}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
