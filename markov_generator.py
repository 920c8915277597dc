#!/usr/bin/env python
import sys
import argparse
import logging
import random

import config
from markov_chain import (BoundaryMode, InsufficientData, MarkupStrip,
                          build_chain, render)
from transcript import (ExtractionError, extract_user_text, load_roster,
                        lookup_user_id, parse_transcript)

logger = logging.getLogger(__name__)


def build_post(transcript: str, user: str = "",
               prefix_length: int = config.MARKOV_PREFIX_LENGTH,
               max_tokens: int = config.MARKOV_MAX_WORDS,
               boundary_mode: BoundaryMode = BoundaryMode.UNBOUNDED,
               markup_strip: MarkupStrip = MarkupStrip.END_MARKER,
               split_sentences: bool = False,
               rng: random.Random = None) -> str:
    """Generate one post in the voice of ``user`` from a raw JSON export."""
    messages = parse_transcript(transcript)
    body = extract_user_text(messages, user, split_sentences=split_sentences)
    chain = build_chain(body.split(), prefix_length)
    generation = chain.generate(max_tokens, boundary_mode, rng)
    logger.info(f"Generated {len(generation.tokens)} tokens, stopped on {generation.stop.value}")
    return render(generation, markup_strip)


def positive_int(value):
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Generate text in the style of a chat user')
    parser.add_argument('--user', help='User name, looked up in the roster ("" for everyone)')
    parser.add_argument('--user-id', help='Speaker id to use as is, skipping the roster')
    parser.add_argument('--roster', default=config.MARKOV_ROSTER_PATH, help='users.list export to resolve names')
    parser.add_argument('--input', '-i', help='Read the export from this file instead of stdin')
    parser.add_argument('--prefix', type=positive_int, default=config.MARKOV_PREFIX_LENGTH,
                        help='Prefix length for chain creation')
    parser.add_argument('--max-words', type=positive_int, default=config.MARKOV_MAX_WORDS,
                        help='Maximum word length for output')
    parser.add_argument('--single', action='store_true', help='Stop at the end of the first utterance')
    strip = parser.add_mutually_exclusive_group()
    strip.add_argument('--no-tags', action='store_true', help='Strip every html tag from the output')
    strip.add_argument('--keep-markers', action='store_true', help='Leave end markers in the output')
    parser.add_argument('--split-sentences', action='store_true',
                        help='Treat every sentence, not every message, as an utterance')
    parser.add_argument('--seed', type=int, help='Random seed for reproducible output')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    args = parser.parse_args(argv)
    if args.user is None and args.user_id is None:
        parser.error('Missing --user flag for user name.')
    return args


def read_transcript(path=None) -> str:
    if path is None:
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                        level=logging.DEBUG if args.verbose else config.MARKOV_LOG_LEVEL)

    try:
        corpus = read_transcript(args.input)
    except (OSError, UnicodeDecodeError) as e:
        sys.exit(f"Error: cannot read transcript: {e}")
    if not corpus.strip():
        sys.exit("Error: No input text provided.")

    if args.no_tags:
        markup_strip = MarkupStrip.ALL_TAGS
    elif args.keep_markers:
        markup_strip = MarkupStrip.NONE
    else:
        markup_strip = MarkupStrip.END_MARKER
    boundary_mode = BoundaryMode.STOP_AT_BOUNDARY if args.single else BoundaryMode.UNBOUNDED

    try:
        if args.user_id is not None:
            user_id = args.user_id
        elif args.user:
            user_id = lookup_user_id(load_roster(args.roster), args.user)
        else:
            user_id = ""
        logger.info(f"Building chain for {user_id or 'everyone'} (prefix {args.prefix}, max {args.max_words})")
        post = build_post(corpus, user_id,
                          prefix_length=args.prefix,
                          max_tokens=args.max_words,
                          boundary_mode=boundary_mode,
                          markup_strip=markup_strip,
                          split_sentences=args.split_sentences,
                          rng=random.Random(args.seed))
    except ExtractionError as e:
        sys.exit(f"Error: {e}")
    except InsufficientData:
        who = args.user_id if args.user_id is not None else (args.user or "everyone")
        sys.exit(f"Error: no data for user {who}")

    print(post)


if __name__ == '__main__':
    main()
