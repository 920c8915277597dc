import json

import pytest

from transcript import (ESCAPED_MARKER, ExtractionError, TranscriptError,
                        UnknownUser, extract_user_text, load_roster,
                        lookup_user_id, parse_transcript)

MESSAGES = [
    {"user": "U1", "text": "hello there"},
    {"user": "U2", "text": "not me"},
    {"user": "U1", "text": "how  are\nyou"},
    {"user": "U1"},
    {"user": "U1", "text": "   "},
]


def test_parse_transcript():
    raw = json.dumps({"ok": True, "messages": MESSAGES})
    assert parse_transcript(raw) == MESSAGES


@pytest.mark.parametrize("raw", ["not json", "[]", '{"ok": true}', '{"messages": {}}'])
def test_parse_transcript_rejects_bad_exports(raw):
    with pytest.raises(TranscriptError):
        parse_transcript(raw)


def test_extract_keeps_one_speaker_in_order():
    assert extract_user_text(MESSAGES, "U1") == "hello there <end/> how are you <end/>"


def test_extract_empty_user_keeps_everyone():
    text = extract_user_text(MESSAGES, "")
    assert text == "hello there <end/> not me <end/> how are you <end/>"


def test_extract_unknown_speaker_is_empty():
    assert extract_user_text(MESSAGES, "U9") == ""


def test_extract_escapes_literal_markers():
    text = extract_user_text([{"user": "U1", "text": "sneaky <end/> and x<end/>y"}], "U1")
    assert text.split() == ["sneaky", ESCAPED_MARKER, "and", f"x{ESCAPED_MARKER}y", "<end/>"]


def test_extract_split_sentences():
    messages = [{"user": "U1", "text": "Hello there. How are you?"}]
    text = extract_user_text(messages, "U1", split_sentences=True)
    assert text == "Hello there. <end/> How are you? <end/>"


def test_roster_lookup(tmp_path):
    path = tmp_path / "userslist.json"
    path.write_text(json.dumps({"members": [
        {"name": "alice", "id": "U1"},
        {"name": "bob", "id": "U2"},
    ]}))
    members = load_roster(path)
    assert lookup_user_id(members, "bob") == "U2"
    with pytest.raises(UnknownUser):
        lookup_user_id(members, "carol")


def test_missing_roster(tmp_path):
    with pytest.raises(ExtractionError):
        load_roster(tmp_path / "nope.json")


def test_roster_without_members(tmp_path):
    path = tmp_path / "userslist.json"
    path.write_text('{"ok": false}')
    with pytest.raises(TranscriptError):
        load_roster(path)
