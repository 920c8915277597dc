import pytest

import config


def test_int_default(monkeypatch):
    monkeypatch.delenv("MARKOV_MAX_WORDS", raising=False)
    assert config._int("MARKOV_MAX_WORDS", 100) == 100


def test_int_from_environment(monkeypatch):
    monkeypatch.setenv("MARKOV_MAX_WORDS", " 250 ")
    assert config._int("MARKOV_MAX_WORDS", 100) == 250


def test_int_names_bad_variable(monkeypatch):
    monkeypatch.setenv("MARKOV_PREFIX_LENGTH", "two")
    with pytest.raises(ValueError, match="MARKOV_PREFIX_LENGTH must be an integer, got 'two'"):
        config._int("MARKOV_PREFIX_LENGTH", 2)
