"""
Repeat detection over the raw user utterances of one session
"""
from typing import Iterable


def normalize_utterance(text: str) -> str:
    return text.strip().lower()


def is_repeat(raw_input: str, history: Iterable[str]) -> bool:
    """
    True if raw_input equals a prior utterance after trimming and lower-casing.

    history must not contain raw_input yet: check before appending.
    """
    normalized = normalize_utterance(raw_input)
    return any(normalize_utterance(previous) == normalized for previous in history)
