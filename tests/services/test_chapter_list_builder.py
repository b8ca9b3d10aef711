#!/usr/bin/env python3
"""
Tests for ChapterListBuilder - chapter discovery, overrides, ordering and cover fallback.
"""

import json
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime

import pytest

from manga_library.core import UNKNOWN_CHAPTER_NUMBER, Chapter, ChapterDetails, Title
from manga_library.io import LibraryFileSystem, TempFileManager, parse_upload_date
from manga_library.services import (
    ChapterListBuilder,
    DefaultChapterRecognizer,
    FileCoverCache,
    apply_overrides,
    sort_chapters,
)


@pytest.fixture
def file_system(library_root):
    return LibraryFileSystem(library_root)


@pytest.fixture
def builder(file_system, tmp_path):
    return ChapterListBuilder(
        file_system,
        cover_store=FileCoverCache(file_system),
        temp_files=TempFileManager(tmp_path / "temp"),
    )


@pytest.fixture
def title_dir(make_title):
    return make_title("Title")


def new_title() -> Title:
    return Title.from_directory_name("Title")


def chapter(number: float, name: str) -> Chapter:
    return Chapter(url=f"Title/{name}", name=name, chapter_number=number)


class SelectiveFailureRecognizer(DefaultChapterRecognizer):
    """Raises for chapter names containing ``token``."""

    def __init__(self, token: str):
        self.token = token

    def parse_chapter_number(self, title_name, chapter_name, known_number=None):
        if self.token in chapter_name:
            raise ValueError("cannot parse")
        return super().parse_chapter_number(title_name, chapter_name, known_number)


class TestOrdering:
    def test_number_descending_then_name_descending(self):
        chapters = [chapter(3, "c"), chapter(1, "a"), chapter(2, "b"), chapter(2, "z")]

        ordered = sort_chapters(chapters)

        assert [(c.chapter_number, c.name) for c in ordered] == [(3, "c"), (2, "z"), (2, "b"), (1, "a")]

    def test_ties_use_natural_order(self):
        chapters = [chapter(-1, "Extra 2"), chapter(-1, "Extra 10")]
        assert [c.name for c in sort_chapters(chapters)] == ["Extra 10", "Extra 2"]

    def test_unknown_numbers_sort_last(self):
        chapters = [chapter(-1, "Oneshot"), chapter(0.5, "Prologue"), chapter(1, "Ch 1")]
        assert [c.name for c in sort_chapters(chapters)] == ["Ch 1", "Prologue", "Oneshot"]


class TestOverrides:
    def test_matches_within_tolerance(self):
        target = chapter(5.0, "Chapter 5")
        apply_overrides([target], [ChapterDetails(chapter_number=5.00002, name="Renamed")])
        assert target.name == "Renamed"

    def test_ignores_distinct_numbers(self):
        target = chapter(5.0, "Chapter 5")
        apply_overrides([target], [ChapterDetails(chapter_number=5.01, name="Renamed")])
        assert target.name == "Chapter 5"

    def test_replaces_only_supplied_fields(self):
        target = Chapter(url="Title/c", name="Chapter 5", chapter_number=5.0, date_upload=42, scanlator="Group")
        apply_overrides([target], [ChapterDetails(chapter_number=5.0, date_upload="2021-06-07T08:09:10")])

        assert target.name == "Chapter 5"
        assert target.scanlator == "Group"
        assert target.date_upload == parse_upload_date("2021-06-07T08:09:10")

    def test_invalid_date_keeps_previous_value(self):
        target = Chapter(url="Title/c", name="c", chapter_number=5.0, date_upload=42)
        apply_overrides([target], [ChapterDetails(chapter_number=5.0, date_upload="yesterday")])
        assert target.date_upload == 42


class TestBuild:
    def test_lists_folders_and_archives_only(self, builder, title_dir, make_zip, png_bytes):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "Chapter 1" / "1.png").write_bytes(png_bytes)
        make_zip(title_dir / "Chapter 2.cbz", {"1.png": png_bytes})
        (title_dir / ".hidden").mkdir()
        (title_dir / "notes.txt").write_text("notes")
        (title_dir / "Chapter 3.7z").write_bytes(b"")

        chapters = builder.build(new_title())

        assert [c.url for c in chapters] == ["Title/Chapter 2.cbz", "Title/Chapter 1"]
        assert [c.name for c in chapters] == ["Chapter 2", "Chapter 1"]
        assert [c.chapter_number for c in chapters] == [2.0, 1.0]

    def test_upload_date_is_modification_time(self, builder, title_dir):
        folder = title_dir / "Chapter 1"
        folder.mkdir()

        (built,) = builder.build(new_title())

        assert built.date_upload == int(folder.stat().st_mtime * 1000)

    def test_applies_chapters_json(self, builder, title_dir):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "Chapter 2").mkdir()
        (title_dir / "chapters.json").write_text(
            json.dumps([{"chapter_number": 2, "name": "The Second", "scanlator": "Team"}])
        )

        chapters = builder.build(new_title())

        assert [(c.name, c.scanlator) for c in chapters] == [("The Second", "Team"), ("Chapter 1", None)]

    def test_malformed_chapters_json_is_ignored(self, builder, title_dir):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "chapters.json").write_text("[{")

        chapters = builder.build(new_title())

        assert [c.name for c in chapters] == ["Chapter 1"]

    def test_epub_metadata_fills_chapter_and_title(self, builder, title_dir, make_epub, png_bytes):
        make_epub(
            title_dir / "Vol 1.epub",
            [("p1", "1.png", png_bytes)],
            metadata={
                "title": "Volume One",
                "creator": "Author",
                "publisher": "Scans",
                "description": "A story.",
                "date": "2020-05-06",
            },
        )
        title = new_title()

        (built,) = builder.build(title)

        assert built.name == "Volume One"
        assert built.scanlator == "Scans"
        assert built.date_upload == int(datetime(2020, 5, 6).timestamp() * 1000)
        assert title.author == "Author"
        assert title.description == "A story."

    def test_epub_creator_is_scanlator_without_publisher(self, builder, title_dir, make_epub, png_bytes):
        make_epub(title_dir / "Vol 1.epub", [("p1", "1.png", png_bytes)], metadata={"creator": "Author"})

        (built,) = builder.build(new_title())

        assert built.scanlator == "Author"

    def test_same_result_with_executor(self, file_system, tmp_path, title_dir):
        for i in range(1, 9):
            (title_dir / f"Chapter {i}").mkdir()
        sequential = ChapterListBuilder(file_system, temp_files=TempFileManager(tmp_path / "temp"))

        with ThreadPoolExecutor(max_workers=4) as executor:
            concurrent = ChapterListBuilder(
                file_system, temp_files=TempFileManager(tmp_path / "temp"), executor=executor
            )
            assert concurrent.build(new_title()) == sequential.build(new_title())

    def test_empty_title(self, builder, title_dir):
        title = new_title()
        assert builder.build(title) == []
        assert title.thumbnail_url is None

    def test_recognizer_failure_keeps_chapter(self, file_system, tmp_path, title_dir):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "odd one").mkdir()
        builder = ChapterListBuilder(
            file_system,
            recognizer=SelectiveFailureRecognizer("odd"),
            temp_files=TempFileManager(tmp_path / "temp"),
        )

        chapters = builder.build(new_title())

        assert [(c.name, c.chapter_number) for c in chapters] == [
            ("Chapter 1", 1.0),
            ("odd one", UNKNOWN_CHAPTER_NUMBER),
        ]

    def test_corrupt_epub_chapter_is_kept(self, builder, tmp_path, title_dir):
        (title_dir / "Chapter 3.epub").write_bytes(b"not an epub at all")
        title = new_title()

        chapters = builder.build(title)

        assert [(c.name, c.chapter_number, c.scanlator) for c in chapters] == [("Chapter 3", 3.0, None)]
        assert title.thumbnail_url is None
        assert builder.update_cover(title, chapters[0]) is None
        assert not (title_dir / "cover.jpg").exists()
        assert list((tmp_path / "temp").iterdir()) == []

class TestCoverFallback:
    def test_stores_first_image_of_last_chapter(self, builder, title_dir, make_zip, png_bytes, jpeg_bytes):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "Chapter 1" / "001.png").write_bytes(png_bytes)
        make_zip(title_dir / "Chapter 2.cbz", {"001.jpg": jpeg_bytes})
        title = new_title()

        builder.build(title)

        cover = title_dir / "cover.jpg"
        assert cover.read_bytes() == png_bytes
        assert title.thumbnail_url == cover.as_uri()

    def test_existing_thumbnail_is_kept(self, builder, title_dir, png_bytes):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "Chapter 1" / "001.png").write_bytes(png_bytes)
        title = new_title()
        title.thumbnail_url = "file:///elsewhere/cover.png"

        builder.build(title)

        assert title.thumbnail_url == "file:///elsewhere/cover.png"
        assert not (title_dir / "cover.jpg").exists()

    def test_chapter_without_images_leaves_title_uncovered(self, builder, title_dir):
        (title_dir / "Chapter 1").mkdir()
        (title_dir / "Chapter 1" / "notes.txt").write_text("no pages")
        title = new_title()

        builder.build(title)

        assert title.thumbnail_url is None
