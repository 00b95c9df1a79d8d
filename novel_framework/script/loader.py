"""
Chapter script loading.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class ScriptLoader:
    """
    Loads chapter scripts from ``<story_path>/<chapter>.txt``.

    Scripts are cached after the first read; call clear_cache() to pick up
    edits on disk.
    """

    EXTENSION = ".txt"

    def __init__(self, story_path: str | Path):
        self.story_path = Path(story_path)
        self._cache: dict[str, list[str]] = {}

    def path_for(self, chapter: str) -> Path:
        return self.story_path / f"{chapter}{self.EXTENSION}"

    def load(self, chapter: str) -> Optional[list[str]]:
        """
        Read a chapter as a list of lines.

        Returns:
            The lines (line endings stripped), or None if unreadable
        """
        if chapter in self._cache:
            return list(self._cache[chapter])

        path = self.path_for(chapter)
        if not path.exists():
            logger.error(f"Chapter script not found: {path}")
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error reading chapter {chapter}: {e}")
            return None

        self._cache[chapter] = lines
        logger.debug(f"Loaded chapter {chapter} ({len(lines)} lines)")
        return list(lines)

    def clear_cache(self) -> None:
        self._cache.clear()
