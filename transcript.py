"""
Reading a Slack-style export: pick one speaker's messages and flatten them
into a single string the chain can be built from.

Every utterance is followed by the end marker. Slack escapes ``<`` in message
text, and literal markers typed by users are escaped here as well, so the
marker never shows up as an ordinary word.
"""
import json
import logging
from typing import Dict, List

import markovify

from markov_chain import END_MARKER

logger = logging.getLogger(__name__)

ESCAPED_MARKER = END_MARKER.replace("<", "&lt;").replace(">", "&gt;")


class ExtractionError(Exception):
    pass


class TranscriptError(ExtractionError):
    pass


class UnknownUser(ExtractionError):
    pass


def _decode(raw: str, what: str) -> dict:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise TranscriptError(f"{what} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise TranscriptError(f"{what} must be a JSON object")
    return data


def parse_transcript(raw: str) -> List[dict]:
    data = _decode(raw, "transcript")
    messages = data.get("messages")
    if not isinstance(messages, list):
        raise TranscriptError("transcript has no 'messages' array")
    return messages


def _utterances(text: str, split_sentences: bool) -> List[str]:
    if not split_sentences:
        return [text]
    return markovify.split_into_sentences(text)


def extract_user_text(messages, user: str = "", split_sentences: bool = False) -> str:
    """Concatenate what ``user`` said, in order, with a marker after each utterance.

    An empty ``user`` keeps every speaker.
    """
    chunks = []
    for message in messages:
        if not isinstance(message, dict):
            continue
        if user and message.get("user") != user:
            continue
        text = message.get("text")
        if not isinstance(text, str):
            continue
        text = " ".join(text.replace(END_MARKER, ESCAPED_MARKER).split())
        if not text:
            continue
        for utterance in _utterances(text, split_sentences):
            if utterance:
                chunks.append(f"{utterance} {END_MARKER}")
    logger.debug(f"Extracted {len(chunks)} utterances for user {user or '<everyone>'}")
    return " ".join(chunks)


def load_roster(path) -> List[Dict]:
    """Read a users.list export (``{"members": [...]}``)."""
    try:
        with open(path, encoding="utf-8") as f:
            raw = f.read()
    except OSError as e:
        raise ExtractionError(f"cannot read roster {path}: {e}") from e
    members = _decode(raw, "roster").get("members")
    if not isinstance(members, list):
        raise TranscriptError("roster has no 'members' array")
    return members


def lookup_user_id(members, name: str) -> str:
    for member in members:
        if isinstance(member, dict) and member.get("name") == name and member.get("id"):
            return member["id"]
    raise UnknownUser(f"cannot find user id for {name!r}")
