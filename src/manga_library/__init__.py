"""Manga Library - local manga/comic library indexing engine."""

__version__ = "0.1.0"
