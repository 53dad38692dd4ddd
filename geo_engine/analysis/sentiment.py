"""
Keyword-based sentiment analysis.
"""

from typing import List

from geo_engine.models import SentimentAnalysis, Tone
from geo_engine.utils.text import tokenize

POSITIVE_KEYWORDS = frozenset([
    "excellent", "great", "best", "top", "leading",
    "outstanding", "superior", "recommended", "popular", "trusted",
    "reliable", "innovative", "effective", "efficient", "powerful",
    "comprehensive", "advanced", "professional", "quality", "expert",
])

NEGATIVE_KEYWORDS = frozenset([
    "poor", "bad", "worst", "limited", "lacks",
    "missing", "inadequate", "insufficient", "problematic", "difficult",
    "complex", "expensive", "overpriced", "slow", "unreliable",
    "outdated", "inferior", "weak", "flawed", "disappointing",
])

TRAILING_PUNCTUATION = ".,!?;:"
MAX_KEYWORDS = 10
MIN_CONFIDENCE = 0.1


class SentimentAnalyzer:
    """Keyword-based tone of one answer text."""

    def analyze(self, text: str) -> SentimentAnalysis:
        words = tokenize(text.lower())
        positive = 0
        negative = 0
        found: List[str] = []

        for word in words:
            word = word.rstrip(TRAILING_PUNCTUATION)
            if word in POSITIVE_KEYWORDS:
                positive += 1
            elif word in NEGATIVE_KEYWORDS:
                negative += 1
            else:
                continue
            if word not in found:
                found.append(word)

        total = positive + negative
        if total == 0:
            tone = Tone.NEUTRAL
        elif positive > negative * 2:
            tone = Tone.POSITIVE
        elif negative > positive * 2:
            tone = Tone.NEGATIVE
        else:
            tone = Tone.MIXED

        # Keyword density per hundred words
        confidence = min(total / max(len(words) / 100, 1), 1.0)

        return SentimentAnalysis(
            tone=tone,
            confidence=max(confidence, MIN_CONFIDENCE),
            keywords=found[:MAX_KEYWORDS],
        )
