"""
Text scanning helpers.

Tokenizer, sentence splitter and interval utilities shared by the
crawler (topics/entities) and the brand mention detector (citation
exclusion).
"""

import re
from collections import Counter
from typing import Iterable, List, NamedTuple, Pattern, Union

SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+")
ENTITY_PATTERN = re.compile(r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b")

MIN_TOPIC_LENGTH = 5
MAX_TOPICS = 10
MIN_ENTITY_LENGTH = 4
MAX_ENTITY_LENGTH = 49
MAX_ENTITIES = 20


class Span(NamedTuple):
    """Half-open character range [start, end)."""
    start: int
    end: int

    def contains(self, other: "Span") -> bool:
        return self.start <= other.start and other.end <= self.end


def find_spans(pattern: Union[str, Pattern], text: str, flags: int = 0) -> List[Span]:
    """All match spans of pattern in text, clamped to the text length."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern, flags)
    length = len(text)
    return [
        Span(min(m.start(), length), min(m.end(), length))
        for m in pattern.finditer(text)
    ]


def is_contained(span: Span, ranges: Iterable[Span]) -> bool:
    return any(r.contains(span) for r in ranges)


def exclude_contained(spans: Iterable[Span], ranges: Iterable[Span]) -> List[Span]:
    """Drop spans that lie entirely inside any of the ranges."""
    ranges = list(ranges)
    return [s for s in spans if not is_contained(s, ranges)]


def split_sentences(text: str) -> List[str]:
    return [s.strip() for s in SENTENCE_SPLIT.split(text) if s.strip()]


def tokenize(text: str) -> List[str]:
    """Whitespace tokenizer."""
    return text.split()


def collapse_whitespace(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def extract_topics(text: str, limit: int = MAX_TOPICS) -> List[str]:
    """Most frequent lowercased tokens longer than four characters."""
    words = [w for w in tokenize(text.lower()) if len(w) >= MIN_TOPIC_LENGTH]
    return [word for word, _ in Counter(words).most_common(limit)]


def extract_entities(text: str, limit: int = MAX_ENTITIES) -> List[str]:
    """Capitalized (multi-)word phrases in order of first appearance."""
    entities: List[str] = []
    seen = set()
    for match in ENTITY_PATTERN.finditer(text):
        entity = match.group(1)
        if not MIN_ENTITY_LENGTH <= len(entity) <= MAX_ENTITY_LENGTH:
            continue
        if entity in seen:
            continue
        seen.add(entity)
        entities.append(entity)
        if len(entities) >= limit:
            break
    return entities
