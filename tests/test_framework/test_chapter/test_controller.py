from unittest.mock import MagicMock, call

import pytest

from novel_engine.core.actions import Action
from novel_engine.core.events import NovelEvent
from novel_framework.chapter.controller import ChapterSnapshot, ChapterState


def event_types(events):
    return [event.type for event in events]

def events_of(events, event_type):
    return [event for event in events if event.type is event_type]


class TestLinePlayback:
    def test_single_line_with_grouped_action(self, make_controller, novel_events, text_box, tick):
        controller = make_controller(chars_per_second=30)
        controller.load_script(["Hello.(next())"], "intro")

        tick(controller, 60)

        assert controller.is_finished
        assert controller.chapter_progress == 1
        assert len(events_of(novel_events, NovelEvent.CHAPTER_FINISHED)) == 1
        text_box.say.assert_called_with("", "Hello.")

    def test_lifecycle_event_order(self, make_controller, novel_events):
        controller = make_controller()
        controller.load_script(['Mira "Hi."'], "intro")

        controller.update(1 / 60)

        assert event_types(novel_events) == [
            NovelEvent.CHAPTER_STARTED,
            NovelEvent.LINE_STARTED,
            NovelEvent.SEGMENT_STARTED,
            NovelEvent.LINE_FINISHED,
            NovelEvent.CHAPTER_FINISHED,
        ]

    def test_waits_for_advance_between_lines(self, make_controller, text_box, tick):
        controller = make_controller()
        controller.load_script(['Mira "One."', 'Mira "Two."'])

        tick(controller, 10)
        text_box.say.assert_called_with("Mira", "One.")
        assert controller.chapter_state is ChapterState.WAITING_FOR_ADVANCE
        assert controller.chapter_progress == 1

        controller.next()
        controller.update(1 / 60)

        text_box.say.assert_called_with("Mira", "Two.")
        assert controller.is_finished

    def test_skips_blank_and_comment_lines(self, make_controller, novel_events):
        controller = make_controller()
        controller.load_script(["", "// stage directions", "   ", 'Mira "Hi."'])

        controller.update(1 / 60)

        started = events_of(novel_events, NovelEvent.LINE_STARTED)
        assert [event["line_index"] for event in started] == [3]

    def test_speaker_is_cached(self, make_controller, text_box):
        controller = make_controller()
        controller.load_script(['Mira "One."', '"Two."', 'narrator "Wind."'])

        controller.update(1 / 60)
        controller.next()
        controller.update(1 / 60)
        text_box.say.assert_called_with("Mira", "Two.")

        controller.next()
        controller.update(1 / 60)
        text_box.say.assert_called_with("", "Wind.")
        assert controller.state.cached_last_speaker == "narrator"

    def test_unknown_command_is_noop(self, make_controller, stage, caplog):
        controller = make_controller()
        controller.load_script(['"Hi." bogus(1) setBackground(forest)'])

        controller.update(1 / 60)

        assert "Unknown command: bogus(1)" in caplog.text
        stage.set_texture.assert_called_once()
        assert controller.is_finished

    def test_malformed_line_reports_and_continues(self, make_controller, novel_events, text_box):
        controller = make_controller()
        controller.load_script(['Mira "Unclosed'])

        controller.update(1 / 60)

        assert events_of(novel_events, NovelEvent.SCRIPT_ERROR)
        text_box.say.assert_called_with("Mira", "Unclosed")
        assert controller.is_finished


class TestChoices:
    SCRIPT = [
        'choice "Which way?"',
        "{",
        '    "Left"',
        "    cmdA()",
        '    "Right"',
        "    cmdB()",
        "}",
        'Mira "Onward."',
    ]

    @pytest.fixture
    def controller(self, registry, recording_command, make_controller):
        registry.register(recording_command("cmdA"))
        registry.register(recording_command("cmdB"))
        controller = make_controller()
        controller.load_script(self.SCRIPT)
        controller.update(1 / 60)
        return controller

    def test_choice_is_presented(self, controller, choice_box, novel_events):
        assert controller.chapter_state is ChapterState.WAITING_FOR_CHOICE
        choice_box.show.assert_called_once_with("Which way?", ["Left", "Right"])
        assert controller.is_waiting_for_widget

    def test_choice_runs_only_chosen_action(self, controller, recorder, choice_box, text_box):
        controller.choose(1)
        controller.update(1 / 60)

        assert recorder == [("cmdB", "")]
        choice_box.hide.assert_called_once()
        assert controller.chapter_progress == 7

        controller.next()
        controller.update(1 / 60)
        text_box.say.assert_called_with("Mira", "Onward.")

    def test_out_of_range_choice_is_ignored(self, controller, recorder):
        controller.choose(5)
        controller.update(1 / 60)

        assert controller.chapter_state is ChapterState.WAITING_FOR_CHOICE
        assert recorder == []

        controller.choose(0)
        controller.update(1 / 60)
        assert recorder == [("cmdA", "")]

    def test_skip_closes_choice(self, controller, choice_box, text_box, recorder):
        controller.skip()
        controller.update(1 / 60)

        choice_box.hide.assert_called_once()
        text_box.say.assert_called_with("Mira", "Onward.")
        assert recorder == []

    def test_advance_and_skip_ignored_while_choice_open(self, controller):
        handler = MagicMock()
        handler.is_action_just_pressed.side_effect = lambda action: action in (Action.ADVANCE, Action.SKIP)

        controller.handle_input(handler)
        controller.update(1 / 60)

        assert not controller.signal.pending
        assert controller.chapter_state is ChapterState.WAITING_FOR_CHOICE

    def test_choice_navigation_and_confirm(self, controller, choice_box, recorder):
        def press(action):
            handler = MagicMock()
            handler.is_action_just_pressed.side_effect = lambda pressed: pressed is action
            controller.handle_input(handler)

        press(Action.CHOICE_DOWN)
        press(Action.CHOICE_DOWN)
        assert controller.highlighted == 1
        choice_box.select.assert_called_once_with(1)

        press(Action.CHOICE_UP)
        press(Action.CHOICE_DOWN)
        press(Action.CONFIRM)
        controller.update(1 / 60)

        assert recorder == [("cmdB", "")]
        choice_box.hide.assert_called_once()

    def test_highlight_resets_for_each_choice(self, controller):
        controller.highlighted = 1
        controller.load_script(self.SCRIPT)
        controller.update(1 / 60)

        assert controller.chapter_state is ChapterState.WAITING_FOR_CHOICE
        assert controller.highlighted == 0


def test_choose_without_open_choice_warns(make_controller, caplog):
    controller = make_controller()
    controller.load_script(['"Hi."'])

    controller.choose(0)

    assert "no choice is open" in caplog.text

def test_empty_choice_block_is_stepped_over(make_controller, novel_events, choice_box, text_box):
    controller = make_controller()
    controller.load_script(['choice "Nothing here"', "{", "}", 'Mira "After."'])

    controller.update(1 / 60)
    assert events_of(novel_events, NovelEvent.SCRIPT_ERROR)
    choice_box.show.assert_not_called()

    controller.update(1 / 60)
    text_box.say.assert_called_with("Mira", "After.")

def test_choice_without_closing_brace_finishes(make_controller, novel_events):
    controller = make_controller()
    controller.load_script(['choice "Open"', "{", '"A"', "cmdA()"])

    controller.update(1 / 60)
    controller.update(1 / 60)

    assert events_of(novel_events, NovelEvent.SCRIPT_ERROR)
    assert controller.is_finished


class TestInput:
    def test_player_name_is_captured_and_injected(self, make_controller, input_box, text_box):
        controller = make_controller()
        controller.load_script([
            'input "What is your name?" savePlayerName() next()',
            'Mira "Nice to meet you, [playerName]."',
        ])

        controller.update(1 / 60)
        input_box.show.assert_called_once_with("What is your name?")
        assert controller.chapter_state is ChapterState.WAITING_FOR_INPUT

        assert controller.accept_input("   ") is False
        assert controller.accept_input("Ada") is True
        controller.update(1 / 60)

        input_box.hide.assert_called_once()
        assert controller.state.player_name == "Ada"

        controller.update(1 / 60)
        text_box.say.assert_called_with("Mira", "Nice to meet you, Ada.")

    def test_temp_input_slot(self, make_controller, text_box):
        controller = make_controller()
        controller.load_script([
            'input "Favourite colour?" saveTempInput(2) next()',
            '"So, [tempVal2]."',
        ])

        controller.update(1 / 60)
        controller.accept_input("green")
        controller.update(1 / 60)
        controller.update(1 / 60)

        text_box.say.assert_called_with("", "So, green.")

    def test_accept_without_open_input(self, make_controller):
        controller = make_controller()
        controller.load_script(['"Hi."'])

        assert controller.accept_input("Ada") is False

    def test_unclosed_title_is_reported(self, make_controller, novel_events, input_box):
        controller = make_controller()
        controller.load_script(['input "Name? savePlayerName()'])

        controller.update(1 / 60)
        controller.update(1 / 60)

        assert events_of(novel_events, NovelEvent.SCRIPT_ERROR)
        input_box.show.assert_not_called()
        assert controller.is_finished


class TestFlowControl:
    def test_skip_runs_no_intermediate_actions(
        self, registry, recording_command, make_controller, recorder, tick,
    ):
        for name in ("cmdA", "cmdB", "cmdC"):
            registry.register(recording_command(name))
        controller = make_controller(chars_per_second=30)
        controller.load_script([
            '"The first line takes a while." cmdA()',
            '"So does the second." cmdB()',
            '"Last." cmdC()',
        ])
        controller.update(1 / 60)

        controller.skip()
        tick(controller, 120)

        assert recorder == [("cmdC", "")]
        assert controller.is_finished

    def test_skip_from_line_started_subscriber(
        self, registry, recording_command, make_controller, recorder, event_bus,
    ):
        for name in ("cmdA", "cmdB", "cmdC"):
            registry.register(recording_command(name))
        controller = make_controller()
        controller.load_script(['"One." cmdA()', '"Two." cmdB()', '"Last." cmdC()'])

        def skip_first_line(event):
            if event["line_index"] == 0:
                controller.skip()

        event_bus.subscribe(NovelEvent.LINE_STARTED, skip_first_line, weak=False)

        controller.update(1 / 60)
        controller.update(1 / 60)

        assert recorder == [("cmdC", "")]
        assert controller.is_finished

    def test_load_action_switches_chapter(
        self, registry, recording_command, make_controller, recorder, story, text_box,
    ):
        registry.register(recording_command("cmdA"))
        registry.register(recording_command("cmdB"))
        story("first", ['"Start." load(second) cmdA()'])
        story("second", ['"Elsewhere." cmdB()'])
        controller = make_controller()

        assert controller.load_chapter("first") is True
        controller.update(1 / 60)
        assert controller.chapter_name == "second"

        controller.update(1 / 60)

        assert recorder == [("cmdB", "")]
        text_box.say.assert_called_with("", "Elsewhere.")
        assert controller.is_finished

    def test_missing_chapter_keeps_current(self, make_controller, novel_events):
        controller = make_controller()
        controller.load_script(['"One."', '"Two."'], "current")
        controller.update(1 / 60)

        assert controller.load_chapter("nowhere") is False

        assert controller.chapter_name == "current"
        assert controller.chapter_state is ChapterState.WAITING_FOR_ADVANCE
        assert events_of(novel_events, NovelEvent.SCRIPT_ERROR)

    def test_handle_input_maps_actions(self, make_controller):
        controller = make_controller()
        controller.load_script(['"One."', '"Two."', '"Three."'])
        controller.update(1 / 60)

        handler = MagicMock()
        handler.is_action_just_pressed.side_effect = lambda action: action is Action.ADVANCE
        controller.handle_input(handler)
        assert controller.signal.pending

        handler.is_action_just_pressed.side_effect = lambda action: action is Action.SKIP
        controller.handle_input(handler)
        assert controller.chapter_progress == 2

    def test_finished_event_fires_once(self, make_controller, novel_events, tick):
        controller = make_controller()
        controller.load_script(['"Only."'])

        tick(controller, 10)
        controller.next()
        tick(controller, 10)

        assert len(events_of(novel_events, NovelEvent.CHAPTER_FINISHED)) == 1


class TestSnapshot:
    def test_snapshot_captures_position(self, make_controller, story):
        story("chap", ['Mira "One."', '"Two."', 'Tomas "Three."'])
        controller = make_controller()
        controller.load_chapter("chap")
        controller.state.scratch.write(1, "x")

        controller.update(1 / 60)
        controller.next()
        controller.update(1 / 60)

        snapshot = controller.snapshot()
        assert snapshot == ChapterSnapshot(
            chapter_name="chap",
            chapter_progress=2,
            cached_last_speaker="Mira",
            temp_vals=["x"] + [""] * 8,
        )

    def test_resume_waits_for_player(self, make_controller, story, text_box, novel_events):
        story("chap", ['Mira "One."', '"Two."', 'Tomas "Three."'])
        controller = make_controller()
        controller.load_script(['"Elsewhere."', '"Still elsewhere."'], "other")
        controller.update(1 / 60)

        resumed = controller.resume(ChapterSnapshot("chap", 2, "Mira", ["y"]))

        assert resumed is True
        assert controller.chapter_name == "chap"
        assert controller.state.scratch.read(1) == "y"
        assert events_of(novel_events, NovelEvent.CHAPTER_STARTED)[-1]["resumed"] is True

        text_box.say.reset_mock()
        controller.update(1 / 60)
        text_box.say.assert_not_called()

        controller.next()
        controller.update(1 / 60)
        assert text_box.say.call_args == call("Tomas", "Three.")

    def test_resume_clamps_progress(self, make_controller, story):
        story("chap", ['"One."'])
        controller = make_controller()

        controller.resume(ChapterSnapshot("chap", 50))
        controller.update(1 / 60)

        assert controller.chapter_progress == 1
        assert controller.is_finished

    def test_resume_missing_chapter(self, make_controller, novel_events):
        controller = make_controller()

        assert controller.resume(ChapterSnapshot("gone", 0)) is False
        assert events_of(novel_events, NovelEvent.SCRIPT_ERROR)
