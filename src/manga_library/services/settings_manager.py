"""Settings Manager - Handles library location and engine configuration."""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

LIBRARY_ROOT_VAR = "MANGA_LIBRARY_ROOT"
WORKERS_VAR = "MANGA_LIBRARY_WORKERS"
LOG_LEVEL_VAR = "MANGA_LIBRARY_LOG_LEVEL"
TEMP_DIR_VAR = "MANGA_LIBRARY_TEMP_DIR"


class SettingsManager:
    """
    Manages engine settings.

    Reads values from the process environment after loading the .env file
    in the project root (existing environment variables win).
    """

    DEFAULT_LOG_LEVEL = "INFO"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize settings manager.

        Args:
            project_root: Path to project root where .env is located.
                         If None, searches upward from current file.
        """
        if project_root is None:
            current = Path(__file__).resolve()
            project_root = current.parent.parent.parent.parent

        env_path = project_root / ".env"
        load_dotenv(dotenv_path=env_path)

        self._project_root = project_root

    def get_library_root(self) -> Optional[Path]:
        """Get the library base directory, or None when not configured."""
        value = os.getenv(LIBRARY_ROOT_VAR)
        return Path(value.strip()).expanduser() if value and value.strip() else None

    def get_max_workers(self) -> int:
        """Get the worker pool size; invalid or missing values use the CPU count."""
        default = os.cpu_count() or 1
        value = os.getenv(WORKERS_VAR)
        if not value or not value.strip():
            return default
        try:
            workers = int(value.strip())
        except ValueError:
            return default
        return workers if workers > 0 else default

    def get_log_level(self) -> str:
        value = os.getenv(LOG_LEVEL_VAR)
        return value.strip().upper() if value and value.strip() else self.DEFAULT_LOG_LEVEL

    def get_temp_directory(self) -> Optional[Path]:
        """Get the directory for temporary archive copies (None: system default)."""
        value = os.getenv(TEMP_DIR_VAR)
        return Path(value.strip()).expanduser() if value and value.strip() else None

    def reload_env(self) -> None:
        """Reload environment variables from .env file."""
        env_path = self._project_root / ".env"
        load_dotenv(dotenv_path=env_path, override=True)
