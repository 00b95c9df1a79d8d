"""
Script text: line grammar, segments, blocks, tags and loading.
"""

from novel_framework.script.segment import Segment, Trigger
from novel_framework.script.grammar import (
    ActionCall,
    Line,
    parse_line,
    parse_call_list,
    serialize_line,
)
from novel_framework.script.blocks import (
    ChoiceBlock,
    InputBlock,
    is_choice_line,
    is_input_line,
    parse_choice_block,
    parse_input_line,
)
from novel_framework.script.tags import inject_tags
from novel_framework.script.loader import ScriptLoader

__all__ = [
    "Segment",
    "Trigger",
    "ActionCall",
    "Line",
    "parse_line",
    "parse_call_list",
    "serialize_line",
    "ChoiceBlock",
    "InputBlock",
    "is_choice_line",
    "is_input_line",
    "parse_choice_block",
    "parse_input_line",
    "inject_tags",
    "ScriptLoader",
]
