"""
Transition function tests. Run with: pytest tests/
"""
import pytest

from core.state import (
    INITIAL_STATE,
    AppendEntry,
    EntryKind,
    FailLast,
    FinishTurn,
    MergeFragment,
    ResetSession,
    Role,
    SessionState,
    SetError,
    SetFile,
    SetLastContent,
    SetParsedData,
    SetQuery,
    StartLoading,
    TranscriptEntry,
    reduce,
)

from conftest import make_chart


def user(text):
    return TranscriptEntry(Role.USER, EntryKind.TEXT, text)


def loading_text():
    return TranscriptEntry(Role.MODEL, EntryKind.TEXT, "", is_loading=True)


def loaded_state():
    return SessionState(
        file="sales.csv",
        parsed_data=({"a": 1},),
        raw_data="a\n1\n",
        user_query="draft",
        is_loading=True,
        error="old error",
        chat=object(),
        transcript=(user("hi"), TranscriptEntry(Role.MODEL, EntryKind.TEXT, "hello")),
    )


def test_start_loading_clears_error():
    state = reduce(SessionState(error="boom"), StartLoading())
    assert state.is_loading is True
    assert state.error is None


def test_set_error_stops_loading():
    state = reduce(SessionState(is_loading=True), SetError("bad"))
    assert state.error == "bad"
    assert state.is_loading is False


def test_set_query():
    assert reduce(INITIAL_STATE, SetQuery("revenue?")).user_query == "revenue?"


def test_set_file_clears_dataset_and_transcript():
    state = reduce(loaded_state(), SetFile("other.csv"))
    assert state.file == "other.csv"
    assert state.parsed_data is None
    assert state.raw_data is None
    assert state.chat is None
    assert state.transcript == ()
    assert state.error is None


def test_set_parsed_data_sets_all_three_together():
    chat = object()
    state = reduce(INITIAL_STATE, SetParsedData([{"a": 1}], "a\n1\n", chat))
    assert state.parsed_data == ({"a": 1},)
    assert state.raw_data == "a\n1\n"
    assert state.chat is chat


def test_reduce_does_not_mutate_input():
    before = SessionState(transcript=(loading_text(),))
    after = reduce(before, MergeFragment("abc"))
    assert before.transcript[0].content == ""
    assert after.transcript[0].content == "abc"


def test_same_action_gives_equal_results():
    state = SessionState(transcript=(user("q"), loading_text()))
    assert reduce(state, MergeFragment("x")) == reduce(state, MergeFragment("x"))


@pytest.mark.parametrize("fragments", [
    ["Hel", "lo"],
    ["a"],
    ["The ", "mean ", "is ", "4.2", "."],
    [],
])
def test_merged_fragments_concatenate_in_order(fragments):
    state = SessionState(is_loading=True, transcript=(user("q"), loading_text()))
    for fragment in fragments:
        state = reduce(state, MergeFragment(fragment, True))
        assert state.last_entry.is_loading is True
    state = reduce(state, FinishTurn())

    assert state.last_entry.content == "".join(fragments)
    assert state.last_entry.is_loading is False
    assert state.is_loading is False


def test_merge_fragment_on_empty_transcript_is_noop():
    assert reduce(INITIAL_STATE, MergeFragment("x")) == INITIAL_STATE


def test_merge_fragment_ignores_non_text_entry():
    dashboard = TranscriptEntry(Role.MODEL, EntryKind.DASHBOARD, (), is_loading=True)
    state = SessionState(transcript=(dashboard,))
    assert reduce(state, MergeFragment("x")) == state


def test_set_last_content_replaces_dashboard():
    charts = (make_chart(), make_chart("line"))
    state = SessionState(transcript=(TranscriptEntry(Role.MODEL, EntryKind.DASHBOARD, (), is_loading=True),))
    state = reduce(state, SetLastContent(charts, is_loading=False))
    assert state.last_entry.content == charts
    assert state.last_entry.is_loading is False


def test_set_last_content_on_empty_transcript_is_noop():
    assert reduce(INITIAL_STATE, SetLastContent((make_chart(),))) == INITIAL_STATE


def test_finish_turn_without_transcript():
    state = reduce(SessionState(is_loading=True), FinishTurn())
    assert state.is_loading is False
    assert state.transcript == ()


def test_fail_last_converts_loading_model_entry_in_place():
    state = SessionState(is_loading=True, transcript=(user("q"), loading_text()))
    failed = reduce(state, FailLast("busy"))

    assert len(failed.transcript) == 2
    assert failed.last_entry == TranscriptEntry(Role.MODEL, EntryKind.ERROR, "busy", is_loading=False)
    assert failed.is_loading is False


def test_fail_last_appends_when_last_entry_is_not_loading():
    state = SessionState(is_loading=True, transcript=(user("q"),))
    failed = reduce(state, FailLast("busy"))

    assert len(failed.transcript) == 2
    assert failed.transcript[0] == user("q")
    assert failed.last_entry.role is Role.MODEL
    assert failed.last_entry.kind is EntryKind.ERROR
    assert failed.is_loading is False


def test_fail_last_appends_on_empty_transcript():
    failed = reduce(INITIAL_STATE, FailLast("busy"))
    assert len(failed.transcript) == 1
    assert not any(entry.is_loading for entry in failed.transcript)


def test_reset_keep_file_preserves_dataset():
    before = loaded_state()
    after = reduce(before, ResetSession(keep_file=True))

    assert after.file == before.file
    assert after.parsed_data == before.parsed_data
    assert after.raw_data == before.raw_data
    assert after.chat is before.chat
    assert after.user_query == ""
    assert after.error is None
    assert after.is_loading is False
    assert after.transcript == ()


def test_full_reset_returns_initial_state():
    assert reduce(loaded_state(), ResetSession(keep_file=False)) == INITIAL_STATE
    assert reduce(loaded_state(), ResetSession(keep_file=False)) == SessionState()


def test_unknown_action_returns_state_unchanged():
    state = loaded_state()
    assert reduce(state, object()) is state
