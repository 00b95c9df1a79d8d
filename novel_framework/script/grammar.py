"""
Line grammar - turns one raw script line into segments and actions.

A line has a displayable part and trailing actions:

```
Mira "Good morning.{c}Did you sleep well?{wa 1.5} I didn't." setFace(Mira,smile) next()
"Same speaker as before, no name given."
The wind picked up. playSound(wind)
Hello.(next())
setBackground(forest,1.5) enter(Mira;Tomas)
```

- Text before the first quote is the speaker; an empty speaker reuses the
  previous one and ``narrator`` shows no name.
- Text between the quotes is dialogue; markers inside it split segments:
  ``{c}`` wait for the player and clear, ``{a}`` wait and append,
  ``{w N}`` wait N seconds and clear, ``{wa N}`` wait N seconds and append.
- Tokens after the closing quote are ``name(args)`` calls, dispatched in
  order once the last segment finishes.
- Without quotes, trailing calls (or a trailing parenthesised group of
  calls) are actions and whatever precedes them is narration.

parse_line never raises: problems are recorded in Line.diagnostics.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from novel_framework.script.segment import Segment, Trigger

logger = logging.getLogger(__name__)

NARRATOR = "narrator"

_CALL_TOKEN = re.compile(r'^([A-Za-z_]\w*)\(([^()]*)\)$')
_NAME_TAIL = re.compile(r'([A-Za-z_]\w*)$')
_CALL_IN_TEXT = re.compile(r'([A-Za-z_]\w*)\(([^()]*)\)')
_WORD = re.compile(r'\S+')


@dataclass(frozen=True)
class ActionCall:
    """A deferred command invocation: name plus its opaque argument string."""
    name: str
    args: str = ""

    @classmethod
    def parse(cls, token: str) -> Optional[ActionCall]:
        """Parse a single ``name(args)`` token, or None if it is not one."""
        match = _CALL_TOKEN.match(token.strip())
        if not match:
            return None
        return cls(name=match.group(1), args=match.group(2))

    def __str__(self) -> str:
        return f"{self.name}({self.args})"


@dataclass
class Line:
    """
    A parsed script line.

    Attributes:
        speaker: Resolved speaker (after falling back to the cached one)
        segments: Displayable pieces, never empty
        actions: Calls fired after the last segment, in order
        diagnostics: Problems found while parsing
        raw: The source text
    """
    speaker: str = ""
    segments: list[Segment] = field(default_factory=lambda: [Segment()])
    actions: list[ActionCall] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list, compare=False)
    raw: str = field(default="", compare=False)

    @property
    def has_dialogue(self) -> bool:
        return any(not s.is_silent for s in self.segments)


def parse_call_list(text: str) -> tuple[list[ActionCall], list[str]]:
    """
    Scan a run of ``name(args)`` calls.

    Arguments may contain spaces, so calls are matched up to their closing
    parenthesis rather than split on whitespace. Anything between calls that
    is not whitespace is rejected one word at a time.

    Returns:
        (calls, rejected tokens)
    """
    calls: list[ActionCall] = []
    rejected: list[str] = []
    pos = 0
    while pos < len(text):
        if text[pos].isspace():
            pos += 1
            continue

        match = _CALL_IN_TEXT.match(text, pos)
        if match:
            calls.append(ActionCall(name=match.group(1), args=match.group(2)))
            pos = match.end()
            continue

        word = _WORD.match(text, pos)
        rejected.append(word.group(0))
        pos = word.end()
    return calls, rejected


def parse_line(raw: str, last_speaker: str = "") -> Line:
    """
    Parse a raw script line.

    Args:
        raw: Line text (tags already injected)
        last_speaker: Speaker to use when the line gives none

    Returns:
        The parsed Line; malformed input yields a best-effort Line
    """
    line = Line(raw=raw)
    parts = raw.split('"')

    if len(parts) >= 3:
        speaker = parts[0].strip() or last_speaker
        dialogue = parts[1]
        if len(parts) > 3:
            line.diagnostics.append("unexpected '\"' after the dialogue")
        tail = '"'.join(parts[2:])
        calls, rejected = parse_call_list(tail)
        for token in rejected:
            line.diagnostics.append(f"ignored non-action token {token!r}")
        line.speaker = speaker
        line.segments = _segment_dialogue(dialogue, _display_name(speaker), line.diagnostics)
        line.actions = calls

    elif len(parts) == 2:
        line.diagnostics.append("unmatched '\"'")
        speaker = parts[0].strip() or last_speaker
        line.speaker = speaker
        line.segments = _segment_dialogue(parts[1], _display_name(speaker), line.diagnostics)

    else:
        content, calls = _split_trailing_actions(raw)
        if content:
            line.segments = _segment_dialogue(content, "", line.diagnostics)
        line.actions = calls

    for message in line.diagnostics:
        logger.warning(f"Script line {raw!r}: {message}")

    return line


def serialize_line(line: Line) -> str:
    """
    Render a Line back to script text.

    Parsing the result yields the same segments, triggers and actions.
    """
    actions = " ".join(str(call) for call in line.actions)
    if not line.has_dialogue and len(line.segments) == 1 and not line.speaker:
        return actions

    text = line.segments[0].text
    for segment in line.segments[1:]:
        text += _marker_for(segment) + segment.text

    head = f'{line.speaker} "{text}"' if line.speaker else f'"{text}"'
    return f"{head} {actions}" if actions else head


def _display_name(speaker: str) -> str:
    return "" if speaker.lower() == NARRATOR else speaker


def _segment_dialogue(dialogue: str, speaker: str, diagnostics: list[str]) -> list[Segment]:
    """Split dialogue on pacing markers; each marker gates the segment after it."""
    segments: list[Segment] = []
    trigger, delay, append = Trigger.ON_PLAYER_ADVANCE, 0.0, False
    buffer = ""
    pos = 0

    while True:
        open_idx = dialogue.find('{', pos)
        if open_idx == -1:
            buffer += dialogue[pos:]
            break
        close_idx = dialogue.find('}', open_idx)
        if close_idx == -1:
            diagnostics.append("unmatched '{' kept as text")
            buffer += dialogue[pos:]
            break

        buffer += dialogue[pos:open_idx]
        segments.append(Segment(
            text=buffer, trigger=trigger, auto_delay=delay, append=append, speaker=speaker,
        ))
        buffer = ""
        trigger, delay, append = _parse_marker(dialogue[open_idx + 1:close_idx], diagnostics)
        pos = close_idx + 1

    segments.append(Segment(
        text=buffer, trigger=trigger, auto_delay=delay, append=append, speaker=speaker,
    ))

    for previous, segment in zip(segments, segments[1:]):
        if segment.append:
            segment.pretext = previous.full_text

    return segments


def _parse_marker(body: str, diagnostics: list[str]) -> tuple[Trigger, float, bool]:
    """Parse the inside of a {...} marker into (trigger, delay, append)."""
    parts = body.split()
    if not parts:
        diagnostics.append("empty '{}' marker treated as {c}")
        return Trigger.ON_PLAYER_ADVANCE, 0.0, False

    kind = parts[0].lower()
    value = parts[1] if len(parts) > 1 else None

    if kind not in ("c", "a", "w", "wa"):
        try:
            return Trigger.AUTO_DELAY, max(0.0, float(kind)), False
        except ValueError:
            diagnostics.append(f"unknown marker {{{body}}} treated as {{c}}")
            return Trigger.ON_PLAYER_ADVANCE, 0.0, False

    append = kind in ("a", "wa")
    if value is None:
        if kind.startswith("w"):
            diagnostics.append(f"marker {{{body}}} has no delay, waiting for the player")
        return Trigger.ON_PLAYER_ADVANCE, 0.0, append

    try:
        return Trigger.AUTO_DELAY, max(0.0, float(value)), append
    except ValueError:
        diagnostics.append(f"bad delay {value!r} in {{{body}}}, waiting for the player")
        return Trigger.ON_PLAYER_ADVANCE, 0.0, append


def _marker_for(segment: Segment) -> str:
    if segment.trigger is Trigger.AUTO_DELAY:
        kind = "wa" if segment.append else "w"
        return f"{{{kind} {segment.auto_delay:g}}}"
    return "{a}" if segment.append else "{c}"


def _split_trailing_actions(text: str) -> tuple[str, list[ActionCall]]:
    """Peel call tokens off the end of an unquoted line."""
    rest = text.rstrip()
    calls: list[ActionCall] = []

    while rest.endswith(')'):
        open_idx = _matching_open(rest)
        if open_idx is None:
            break

        head = rest[:open_idx]
        inner = rest[open_idx + 1:-1]

        name = _NAME_TAIL.search(head)
        if name and '(' not in inner and ')' not in inner:
            calls.insert(0, ActionCall(name=name.group(1), args=inner))
            rest = head[:name.start()].rstrip()
            continue

        group, rejected = parse_call_list(inner)
        if group and not rejected:
            calls[0:0] = group
            rest = head.rstrip()
            continue

        break

    return rest.strip(), calls


def _matching_open(text: str) -> Optional[int]:
    """Index of the '(' matching the final ')' of text."""
    depth = 0
    for i in range(len(text) - 1, -1, -1):
        if text[i] == ')':
            depth += 1
        elif text[i] == '(':
            depth -= 1
            if depth == 0:
                return i
    return None
