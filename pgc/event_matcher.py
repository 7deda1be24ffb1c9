"""Event name matching between our tournaments and external feeds."""

import re
from dataclasses import dataclass, field

from .constants import EVENT_STOP_WORDS

# Thresholds on token overlap
STRONG_OVERLAP = 0.6
WEAK_OVERLAP = 0.5
WEAK_OVERLAP_MIN_TOKENS = 2


@dataclass
class EventNameMatch:
    """Outcome of comparing an expected event name with a feed's event name."""
    compatible: bool
    score: float
    overlapping_tokens: list[str] = field(default_factory=list)
    expected_tokens: list[str] = field(default_factory=list)
    actual_tokens: list[str] = field(default_factory=list)


def normalize_event_name(name: str) -> str:
    """
    Lowercase a name, replace punctuation with spaces and collapse whitespace.

    Args:
        name: Raw event name (e.g., "THE PLAYERS Championship")

    Returns:
        Normalized name (e.g., "the players championship")
    """
    normalized = re.sub(r'[^a-z0-9\s]', ' ', (name or '').lower())
    return re.sub(r'\s+', ' ', normalized).strip()


def tokenize_event_name(name: str) -> list[str]:
    """
    Split an event name into identity-bearing tokens.

    Simple plurals are singularized ("Masters" -> "master"); single
    characters, numbers and generic words ("championship", "the", ...) are
    dropped.
    """
    text = (name or '').lower().replace('&', ' and ')
    text = re.sub(r'[^a-z0-9\s]', ' ', text)

    tokens = []
    for word in text.split():
        if word.endswith('s') and len(word) > 3:
            word = word[:-1]
        if len(word) <= 1 or word.isdigit() or word in EVENT_STOP_WORDS:
            continue
        tokens.append(word)
    return tokens


def match_event_names(expected_name: str, actual_name: str) -> EventNameMatch:
    """
    Decide whether a feed's event name refers to the expected tournament.

    Substring containment after normalization is an immediate match.
    Otherwise the token overlap |common| / max(|expected|, |actual|, 1)
    must reach 0.6, or 0.5 with at least two shared tokens.

    Args:
        expected_name: Our tournament name
        actual_name: Event name reported by the feed

    Returns:
        EventNameMatch with the score and the tokens compared
    """
    expected_tokens = tokenize_event_name(expected_name)
    actual_tokens = tokenize_event_name(actual_name)

    expected_norm = normalize_event_name(expected_name)
    actual_norm = normalize_event_name(actual_name)
    if expected_norm and actual_norm:
        if expected_norm in actual_norm or actual_norm in expected_norm:
            return EventNameMatch(
                compatible=True,
                score=1.0,
                expected_tokens=expected_tokens,
                actual_tokens=actual_tokens,
            )

    expected_set = set(expected_tokens)
    actual_set = set(actual_tokens)
    # Keep expected-name order for readable diagnostics
    overlapping = [t for t in dict.fromkeys(expected_tokens) if t in actual_set]
    denom = max(len(expected_set), len(actual_set), 1)
    score = len(overlapping) / denom
    compatible = score >= STRONG_OVERLAP or (
        score >= WEAK_OVERLAP and len(overlapping) >= WEAK_OVERLAP_MIN_TOKENS
    )

    return EventNameMatch(
        compatible=compatible,
        score=score,
        overlapping_tokens=overlapping,
        expected_tokens=expected_tokens,
        actual_tokens=actual_tokens,
    )
