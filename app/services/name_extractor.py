"""
Name extraction for self-introductions ("my name is Thabo", "call me Lerato")
"""
import re
from typing import List, Optional


# Checked in order; the first pattern that matches wins
NAME_PATTERNS: List[re.Pattern] = [
    re.compile(r"my name is (\w+)", re.IGNORECASE),
    re.compile(r"i'm (\w+)", re.IGNORECASE),
    re.compile(r"i am (\w+)", re.IGNORECASE),
    re.compile(r"call me (\w+)", re.IGNORECASE),
]


def extract_name(raw_input: str) -> Optional[str]:
    """Return the name captured by the first matching pattern, or None"""
    if not raw_input:
        return None
    for pattern in NAME_PATTERNS:
        match = pattern.search(raw_input)
        if match:
            return match.group(1)
    return None
