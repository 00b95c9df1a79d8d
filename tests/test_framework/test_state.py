from novel_framework.state import NovelState, ScratchStore


def test_scratch_starts_empty():
    store = ScratchStore()

    assert len(store) == 9
    assert store.values() == [""] * 9

def test_write_is_one_based_and_clamped():
    store = ScratchStore()

    assert store.write(1, "a") == 0
    assert store.write("9", "z") == 8
    assert store.write(0, "low") == 0
    assert store.write(12, "high") == 8

    assert store.read(1) == "low"
    assert store.read(9) == "high"

def test_non_numeric_index_uses_first_slot(caplog):
    store = ScratchStore()

    store.write("first", "value")

    assert store[0] == "value"
    assert "not an integer" in caplog.text

def test_tilde_becomes_space():
    store = ScratchStore()
    store.write(2, "old~oak~door")

    assert store.read(2) == "old oak door"

def test_load_pads_and_truncates():
    store = ScratchStore(["a", "b"])
    assert store.values() == ["a", "b"] + [""] * 7

    store.load([str(i) for i in range(12)])
    assert store.values() == [str(i) for i in range(9)]

    store.clear()
    assert store.values() == [""] * 9

def test_novel_state_defaults():
    state = NovelState()

    assert state.player_name == ""
    assert state.last_input == ""
    assert state.cached_last_speaker == ""
    assert state.scratch.values() == [""] * 9
    assert NovelState().scratch is not state.scratch
