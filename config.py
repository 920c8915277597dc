# config.py
import os
from dotenv import load_dotenv, find_dotenv

# local .env, never overriding variables already set in the environment
load_dotenv(find_dotenv(usecwd=True))


def _int(name: str, default: int) -> int:
    value = os.getenv(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


MARKOV_PREFIX_LENGTH = _int("MARKOV_PREFIX_LENGTH", 2)
MARKOV_MAX_WORDS     = _int("MARKOV_MAX_WORDS", 100)
# curl https://slack.com/api/users.list?token=$TOKEN > userslist.json
MARKOV_ROSTER_PATH   = os.getenv("MARKOV_ROSTER_PATH", "userslist.json").strip()
MARKOV_LOG_LEVEL     = os.getenv("MARKOV_LOG_LEVEL", "WARNING").strip().upper()
