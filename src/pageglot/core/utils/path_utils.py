# src/pageglot/core/utils/path_utils.py
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important package and user paths.
    """

    # --- Package specific paths

    @staticmethod
    def get_content_root() -> Path:
        """Returns the directory holding the top-level packages (the 'src' dir)."""
        return Path(__file__).resolve().parents[3]

    @staticmethod
    def get_app_package_root() -> Path:
        return PathUtils.get_content_root() / "pageglot"

    @staticmethod
    def get_overlay_package_root() -> Path:
        return PathUtils.get_content_root() / "overlay"

    @staticmethod
    def get_dictionaries_dir() -> Path:
        return PathUtils.get_overlay_package_root() / "data" / "dictionaries"

    # --- User specific paths ---

    @staticmethod
    def get_user_data_dir() -> Path:
        """
        Returns the path to the user's .pageglot data directory.
        (e.g., ~/.pageglot/)
        """
        return Path.home() / ".pageglot"

    @staticmethod
    def get_db_path(configured: Optional[str] = None) -> Path:
        """
        Returns the SQLite database path, creating its parent directory.
        An explicitly configured path wins over the user data directory.
        """
        path = Path(configured).expanduser() if configured else PathUtils.get_user_data_dir() / "pageglot.db"
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
