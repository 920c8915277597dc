"""
Word-level Markov chain over a chat transcript.

The chain maps a prefix of N words to every word that followed it in the
source text. Duplicates are kept, so a word seen twice after a prefix is
twice as likely to be picked. Generation starts right after an utterance
boundary and walks the table until it runs out of continuations, hits the
word limit or (optionally) reaches the next boundary.
"""
import logging
import random
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

END_MARKER = "<end/>"
TRUNCATION_MARKER = "[...]"
# Padding of the initial window; whitespace tokenization never yields it.
PAD = ""

TAG_PATTERN = re.compile(r"<[^>]*>")


class InsufficientData(Exception):
    """The transcript holds no utterance boundary to start generating from."""


class BoundaryMode(Enum):
    UNBOUNDED = "unbounded"
    STOP_AT_BOUNDARY = "stop_at_boundary"


class MarkupStrip(Enum):
    NONE = "none"
    END_MARKER = "end_marker"
    ALL_TAGS = "all_tags"


class Stop(Enum):
    """Why a walk ended."""
    EXHAUSTED = "exhausted"
    BOUNDARY = "boundary"
    LENGTH = "length"


@dataclass
class Generation:
    tokens: List[str]
    stop: Stop
    start_key: str


def is_boundary(token: str) -> bool:
    return token == END_MARKER or token == PAD


class Prefix:
    """Fixed-width window over the most recent tokens."""

    def __init__(self, words: Sequence[str]):
        self.words = list(words)

    def shift(self, word: str):
        self.words = self.words[1:] + [word]

    def key(self) -> str:
        return " ".join(self.words)

    @staticmethod
    def split(key: str) -> List[str]:
        return key.split(" ")


class Chain:
    def __init__(self, prefix_length: int = 2):
        if prefix_length < 1:
            raise ValueError(f"prefix length must be at least 1, got {prefix_length}")
        self.prefix_length = prefix_length
        self.table: Dict[str, List[str]] = {}

    def build(self, tokens):
        """Record every token under the window of words that preceded it."""
        prefix = Prefix([PAD] * self.prefix_length)
        for token in tokens:
            self.table.setdefault(prefix.key(), []).append(token)
            prefix.shift(token)
        logger.debug(f"Chain built: {len(self.table)} prefixes, order {self.prefix_length}")
        return self

    def start_keys(self) -> List[str]:
        keys = []
        for key, choices in self.table.items():
            words = Prefix.split(key)
            if not is_boundary(words[0]) or any(is_boundary(w) for w in words[1:]):
                continue
            # A single-word key is just the boundary; it needs somewhere to go.
            if len(words) == 1 and all(END_MARKER in c for c in choices):
                continue
            keys.append(key)
        return keys

    def generate(self, max_tokens: int = 100,
                 boundary_mode: BoundaryMode = BoundaryMode.UNBOUNDED,
                 rng: Optional[random.Random] = None) -> Generation:
        if max_tokens < 1:
            raise ValueError(f"max tokens must be at least 1, got {max_tokens}")
        rng = rng or random.Random()

        candidates = self.start_keys()
        if not candidates:
            raise InsufficientData("no utterance boundary to start from")
        start_key = rng.choice(candidates)
        logger.debug(f"Starting from {start_key!r} ({len(candidates)} candidates)")

        prefix = Prefix(Prefix.split(start_key))
        words = list(prefix.words)
        budget = max_tokens - (len(words) - 1)
        if budget <= 0:
            # The start key alone already fills the limit.
            words = words[:max_tokens + 1] + [TRUNCATION_MARKER]
            return Generation(words, Stop.LENGTH, start_key)

        stop = Stop.EXHAUSTED
        for i in range(budget):
            choices = self.table.get(prefix.key())
            if not choices:
                break
            word = rng.choice(choices)
            if boundary_mode is BoundaryMode.STOP_AT_BOUNDARY and END_MARKER in word:
                stop = Stop.BOUNDARY
                break
            words.append(word)
            prefix.shift(word)
            if i == budget - 1:
                words.append(TRUNCATION_MARKER)
                stop = Stop.LENGTH
        logger.debug(f"Walk ended ({stop.value}) after {len(words)} tokens")
        return Generation(words, stop, start_key)


def build_chain(tokens, prefix_length: int = 2) -> Chain:
    return Chain(prefix_length).build(tokens)


def strip_markup(tokens, markup_strip: MarkupStrip = MarkupStrip.END_MARKER) -> List[str]:
    if markup_strip is MarkupStrip.NONE:
        return list(tokens)
    if markup_strip is MarkupStrip.END_MARKER:
        return [t for t in tokens if t != END_MARKER]
    # tags may span several words, so strip them from the joined text
    return TAG_PATTERN.sub("", " ".join(tokens)).split()


def render(generation: Generation,
           markup_strip: MarkupStrip = MarkupStrip.END_MARKER) -> str:
    """Turn a walk into text: drop the boundary it started from, then clean up."""
    words = generation.tokens
    if words and is_boundary(words[0]):
        words = words[1:]
    return " ".join(strip_markup(words, markup_strip))
