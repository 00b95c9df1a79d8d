import pytest

from novel_framework.errors import ScriptMalformedError
from novel_framework.script.blocks import (
    is_choice_line,
    is_input_line,
    parse_choice_block,
    parse_input_line,
)

SCRIPT = [
    'Mira "Where to?"',
    'choice "Pick a path"',
    '{',
    '    "The forest"',
    '    setBackground(forest) next()',
    '    "The river"',
    '    Mira "The river it is." load(river)',
    '}',
    'After the choice.',
]


def test_parse_choice_block():
    block = parse_choice_block(SCRIPT, 1)

    assert block.title == "Pick a path"
    assert block.choices == ["The forest", "The river"]
    assert block.actions == [
        "setBackground(forest) next()",
        'Mira "The river it is." load(river)',
    ]
    assert block.start == 1
    assert block.end == 7

def test_empty_choice_block_is_malformed():
    lines = ['choice "Nothing"', '{', '}', 'next line']

    with pytest.raises(ScriptMalformedError) as exc:
        parse_choice_block(lines, 0)

    assert exc.value.end_index == 2
    assert "no choices" in str(exc.value)

def test_missing_closing_brace_is_malformed():
    lines = ['choice "Open"', '{', '"A"', 'a()']

    with pytest.raises(ScriptMalformedError) as exc:
        parse_choice_block(lines, 0)

    assert exc.value.end_index == 3

def test_label_without_action_is_malformed():
    lines = ['choice "Broken"', '{', '"A"', '}']

    with pytest.raises(ScriptMalformedError):
        parse_choice_block(lines, 0)

def test_malformed_error_reports_line_number():
    error = ScriptMalformedError("boom", line_index=4)

    assert str(error) == "line 5: boom"
    assert error.line_index == 4

def test_keyword_detection():
    assert is_choice_line('choice "Title"')
    assert is_choice_line('  choice "Title"')
    assert not is_choice_line("choices are hard")
    assert not is_choice_line('Mira "choice"')
    assert is_input_line('input "Name?" savePlayerName()')
    assert not is_input_line("inputs matter")

def test_parse_input_line():
    block = parse_input_line('input "What is your name?" savePlayerName() next()')

    assert block.title == "What is your name?"
    assert [str(a) for a in block.actions] == ["savePlayerName()", "next()"]

def test_input_line_with_unmatched_quote():
    with pytest.raises(ScriptMalformedError):
        parse_input_line('input "Name? next()', 3)

def test_comments_inside_choice_block_are_skipped():
    lines = [
        'choice "Pick"',
        '{',
        '    // the safe option',
        '    "Stay"',
        '    // stays put',
        '    cmdA()',
        '',
        '    "Go"',
        '    cmdB()',
        '}',
    ]

    block = parse_choice_block(lines, 0)

    assert block.choices == ["Stay", "Go"]
    assert block.actions == ["cmdA()", "cmdB()"]
    assert block.end == 9
