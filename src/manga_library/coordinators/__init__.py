"""Coordinators - wiring of the library services into the engine facade."""

from manga_library.coordinators.library_coordinator import LibraryCoordinator

__all__ = ["LibraryCoordinator"]
