"""
Multi-line and keyword constructs: choice blocks and input lines.

```
choice "Where to?"
{
    "The forest"
    setBackground(forest) next()
    "The river"
    Mira "The river it is." load(river)
}

input "What is your name?" savePlayerName() next()
```

Choice labels pair positionally with the line that follows them; blank and
``//`` comment lines inside the block are skipped.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from novel_framework.errors import ScriptMalformedError
from novel_framework.script.grammar import ActionCall, parse_call_list

logger = logging.getLogger(__name__)

COMMENT_PREFIX = "//"

CHOICE_PATTERN = re.compile(r'^choice\b')
INPUT_PATTERN = re.compile(r'^input\b')


@dataclass
class ChoiceBlock:
    """A parsed choice block spanning lines start..end (end is the closing brace)."""
    title: str
    choices: list[str] = field(default_factory=list)
    actions: list[str] = field(default_factory=list)
    start: int = 0
    end: int = 0


@dataclass
class InputBlock:
    """A text prompt whose actions fire once the player accepts a value."""
    title: str
    actions: list[ActionCall] = field(default_factory=list)


def is_choice_line(line: str) -> bool:
    return bool(CHOICE_PATTERN.match(line.strip()))


def is_input_line(line: str) -> bool:
    return bool(INPUT_PATTERN.match(line.strip()))


def _quoted(text: str) -> Optional[str]:
    parts = text.split('"')
    if len(parts) < 3:
        return None
    return parts[1]


def _is_filler(text: str) -> bool:
    return not text or text.startswith(COMMENT_PREFIX)


def _next_content(lines: list[str], start: int) -> Optional[int]:
    """Index of the first line from start that is not blank or a comment."""
    for i in range(start, len(lines)):
        if not _is_filler(lines[i].strip()):
            return i
    return None


def parse_choice_block(lines: list[str], start: int) -> ChoiceBlock:
    """
    Parse the choice block whose header is lines[start].

    Raises:
        ScriptMalformedError: If the closing brace is missing, a label has
            no action line, or the block has no choices. end_index on the
            error marks where the broken block stops.
    """
    title = _quoted(lines[start])
    if title is None:
        logger.warning(f"Choice header on line {start + 1} has no quoted title")
        title = ""

    choices: list[str] = []
    actions: list[str] = []

    i = start + 1
    while i < len(lines):
        text = lines[i].strip()
        if text == "{" or _is_filler(text):
            i += 1
            continue
        if text == "}":
            break

        label = _quoted(text)
        if label is None:
            logger.warning(f"Choice label on line {i + 1} is not quoted: {text!r}")
            label = text

        action_index = _next_content(lines, i + 1)
        if action_index is None or lines[action_index].strip() == "}":
            raise ScriptMalformedError(
                f"choice label {label!r} has no action line",
                i, end_index=len(lines) - 1 if action_index is None else action_index,
            )

        choices.append(label)
        actions.append(lines[action_index].strip())
        i = action_index + 1
    else:
        raise ScriptMalformedError("choice block has no closing '}'", start, end_index=len(lines) - 1)

    if not choices:
        raise ScriptMalformedError("choice block has no choices", start, end_index=i)

    return ChoiceBlock(title=title, choices=choices, actions=actions, start=start, end=i)


def parse_input_line(line: str, index: int = 0) -> InputBlock:
    """
    Parse ``input "Title" cmd()...``.

    Raises:
        ScriptMalformedError: If the title quote is not closed
    """
    parts = line.split('"')
    if len(parts) == 2:
        raise ScriptMalformedError("input title has an unmatched '\"'", index, end_index=index)

    if len(parts) < 3:
        title, tail = "", INPUT_PATTERN.sub("", line.strip(), count=1)
    else:
        title, tail = parts[1], '"'.join(parts[2:])

    calls, rejected = parse_call_list(tail)
    for token in rejected:
        logger.warning(f"Input line {index + 1}: ignored non-action token {token!r}")

    return InputBlock(title=title, actions=calls)
