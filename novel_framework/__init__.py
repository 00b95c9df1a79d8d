"""
Novel Framework - the chapter script interpreter.

Modules:
- script: line grammar, segments, choice/input blocks, tags, loading
- commands: command registry, argument helpers, built-in commands
- chapter: advance signal, segment playback, action dispatch, controller
- save: JSON save slots
- collaborators: protocols for layers, characters, audio and widgets
"""

from novel_framework.config import NovelConfig
from novel_framework.errors import NovelError, ScriptMalformedError, DuplicateCommandError
from novel_framework.state import NovelState, ScratchStore
from novel_framework.script import ActionCall, Line, Segment, Trigger, parse_line, serialize_line
from novel_framework.commands import Command, CommandRegistry, CommandServices
from novel_framework.chapter import ChapterSnapshot, ChapterState, NovelController
from novel_framework.collaborators import FileAssetLibrary, Layer
from novel_framework.save import GameFile, NovelSaveManager, SaveEvent
from novel_framework.bootstrap import create_novel

__all__ = [
    "NovelConfig",
    "NovelError",
    "ScriptMalformedError",
    "DuplicateCommandError",
    "NovelState",
    "ScratchStore",
    "ActionCall",
    "Line",
    "Segment",
    "Trigger",
    "parse_line",
    "serialize_line",
    "Command",
    "CommandRegistry",
    "CommandServices",
    "ChapterSnapshot",
    "ChapterState",
    "NovelController",
    "FileAssetLibrary",
    "Layer",
    "GameFile",
    "NovelSaveManager",
    "SaveEvent",
    "create_novel",
]
