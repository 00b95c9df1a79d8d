"""
Save/Load for chapter progress.
"""

from novel_framework.save.manager import GameFile, NovelSaveManager, SaveEvent

__all__ = ["GameFile", "NovelSaveManager", "SaveEvent"]
