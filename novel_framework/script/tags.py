"""
Tag injection - substitutes session values into raw script text.

``[playerName]`` becomes the accepted player name and ``[tempVal1]`` ..
``[tempVal9]`` read the scratch store. Unknown tags are left untouched.
"""

from __future__ import annotations

import re

from novel_framework.state import NovelState

TAG_PATTERN = re.compile(r'\[(playerName|tempVal([1-9]))\]')


def inject_tags(line: str, state: NovelState) -> str:
    """Replace known tags in line with values from state."""
    def _replace(match: re.Match) -> str:
        if match.group(2):
            return state.scratch.read(int(match.group(2)))
        return state.player_name

    return TAG_PATTERN.sub(_replace, line)
