import pytest

from novel_framework.script.grammar import ActionCall, parse_line, parse_call_list, serialize_line
from novel_framework.script.segment import Trigger


def test_quoted_line_with_speaker_and_actions():
    line = parse_line('Mira "Good morning." setFace(Mira,smile) next()')

    assert line.speaker == "Mira"
    assert len(line.segments) == 1
    assert line.segments[0].text == "Good morning."
    assert line.segments[0].speaker == "Mira"
    assert line.actions == [ActionCall("setFace", "Mira,smile"), ActionCall("next", "")]
    assert line.diagnostics == []

def test_empty_speaker_reuses_last_speaker():
    line = parse_line('"Still me."', last_speaker="Tomas")

    assert line.speaker == "Tomas"
    assert line.segments[0].speaker == "Tomas"

def test_narrator_shows_no_name():
    line = parse_line('narrator "It was late."')

    assert line.speaker == "narrator"
    assert line.segments[0].speaker == ""

def test_markers_split_segments():
    line = parse_line('Mira "One{c}Two{a} three{w 1.5}Four{wa 2}Five"')
    segments = line.segments

    assert [s.text for s in segments] == ["One", "Two", " three", "Four", "Five"]
    assert [s.trigger for s in segments[1:]] == [
        Trigger.ON_PLAYER_ADVANCE,
        Trigger.ON_PLAYER_ADVANCE,
        Trigger.AUTO_DELAY,
        Trigger.AUTO_DELAY,
    ]
    assert segments[3].auto_delay == 1.5
    assert segments[4].auto_delay == 2.0
    assert [s.append for s in segments] == [False, False, True, False, True]

def test_append_segments_carry_previous_text():
    line = parse_line('"Wait{a} for{a} it"')

    assert line.segments[1].pretext == "Wait"
    assert line.segments[2].pretext == "Wait for"
    assert line.segments[2].full_text == "Wait for it"

def test_no_markers_is_single_segment():
    line = parse_line('"Just one piece of text."')

    assert len(line.segments) == 1

def test_unquoted_narration_with_trailing_actions():
    line = parse_line("The wind picked up. playSound(wind) next()")

    assert line.speaker == ""
    assert line.segments[0].text == "The wind picked up."
    assert [str(a) for a in line.actions] == ["playSound(wind)", "next()"]

def test_parenthesised_action_group():
    line = parse_line("Hello.(next())")

    assert line.segments[0].text == "Hello."
    assert line.actions == [ActionCall("next", "")]

def test_action_only_line_has_one_silent_segment():
    line = parse_line("setBackground(forest,1.5) enter(Mira;Tomas)")

    assert len(line.segments) == 1
    assert line.segments[0].is_silent
    assert not line.has_dialogue
    assert [a.name for a in line.actions] == ["setBackground", "enter"]

def test_parentheses_in_narration_are_not_actions():
    line = parse_line("He smiled (briefly).")

    assert line.segments[0].text == "He smiled (briefly)."
    assert line.actions == []

def test_argument_string_is_opaque():
    line = parse_line('"Go." enter(A;B,2.5,true)')

    assert line.actions[0].args == "A;B,2.5,true"

@pytest.mark.parametrize("raw, fragment", [
    ('Mira "never closed', "unmatched '\"'"),
    ('"Wait{w soon}here"', "bad delay"),
    ('"Odd{zz}marker"', "unknown marker"),
    ('"Open {brace"', "unmatched '{'"),
    ('"Hi." not-an-action', "non-action token"),
])
def test_malformed_input_is_diagnosed_not_raised(raw, fragment):
    line = parse_line(raw)

    assert any(fragment in d for d in line.diagnostics)
    assert line.segments

def test_malformed_marker_waits_for_player():
    line = parse_line('"A{w soon}B"')

    assert line.segments[1].trigger is Trigger.ON_PLAYER_ADVANCE

def test_unmatched_brace_kept_as_text():
    line = parse_line('"Open {brace"')

    assert line.segments[0].text == "Open {brace"

def test_parse_call_list_rejects_non_calls():
    calls, rejected = parse_call_list("a() b(1,2) c")

    assert calls == [ActionCall("a", ""), ActionCall("b", "1,2")]
    assert rejected == ["c"]

def test_action_call_parse():
    assert ActionCall.parse("move(Mira,0.5)") == ActionCall("move", "Mira,0.5")
    assert ActionCall.parse("move") is None

@pytest.mark.parametrize("raw", [
    'Mira "Good morning.{c}Did you sleep?{wa 1.5} I did not." setFace(Mira,smile) next()',
    'narrator "It was late{w 0.25}, very late."',
    "The wind picked up. playSound(wind)",
    "setBackground(forest,1.5) enter(Mira;Tomas)",
    '"{c}Starts with a wait"',
    'Mira "" next()',
    "The wind picked up. setBackground(forest, 1.5)",
    'Mira "Over there." move(Mira, left, 2) next()',
])
def test_serialize_round_trip(raw):
    line = parse_line(raw)
    again = parse_line(serialize_line(line))

    assert again == line
    assert [str(a) for a in again.actions] == [str(a) for a in line.actions]

def test_call_arguments_may_contain_spaces():
    calls, rejected = parse_call_list("move(Mira, left) next()  stray")

    assert calls == [ActionCall("move", "Mira, left"), ActionCall("next", "")]
    assert rejected == ["stray"]

def test_quoted_and_unquoted_lines_accept_the_same_calls():
    quoted = parse_line('"The wind picked up." setBackground(forest, 1.5)')
    unquoted = parse_line("The wind picked up. setBackground(forest, 1.5)")

    assert quoted.actions == unquoted.actions == [ActionCall("setBackground", "forest, 1.5")]
    assert quoted.diagnostics == []
