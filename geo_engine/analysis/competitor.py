"""
Competitor Detection

Counts mentions of competitors in an answer. Competitors come from two
places: the names the user supplies, and company names discovered in the
answer itself through comparison phrases ("compared to Globex Corp",
"alternatives include Initech Systems") and company-name patterns
("Globex Corp is a ...", "Initech Software LLC").

Discovered names must be at least two capitalized words so ordinary
sentence starts are not mistaken for companies. The brand itself, in
any of its spellings, is never reported as a competitor.
"""

import re
from typing import Dict, List

from geo_engine.utils.urls import brand_domain_form

# Words that never start a company name
COMMON_WORDS = frozenset({
    "this", "that", "these", "those", "the", "a", "an", "and", "or", "but",
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
    "do", "does", "did", "will", "would", "should", "could", "may", "might",
    "can", "must", "shall", "get", "got", "go", "come", "see", "know", "think",
    "take", "give", "make", "find", "say", "tell", "ask", "work", "try", "use",
    "want", "need", "feel", "become", "leave", "put", "mean", "keep", "let",
    "begin", "seem", "help", "show", "hear", "play", "run", "move", "like",
    "live", "believe", "bring", "happen", "write", "sit", "stand", "lose", "pay",
    "meet", "include", "continue", "set", "learn", "change", "lead", "understand",
    "watch", "follow", "stop", "create", "speak", "read", "spend", "grow", "open",
    "walk", "win", "offer", "remember", "love", "consider", "appear", "buy",
    "wait", "serve", "die", "send", "build", "stay", "fall", "cut", "reach",
    "kill", "raise", "pass", "sell", "decide", "return", "explain", "develop",
    "carry", "break", "receive", "agree", "support", "hit", "produce", "eat",
    "cover", "catch", "draw", "choose", "cause", "provide", "focus", "routine",
    "values", "staying", "define", "divide", "establish", "consistency", "track",
    "progress", "seeing", "celebrate", "positive", "believing", "accountability",
    "share", "eliminate", "distractions", "identify", "reflect", "adjust",
    "regularly", "practice", "patience", "connect", "habits", "align", "clear",
    "goals", "down", "reminders", "reward", "yourself",
    # sentence openers common in answers
    "if", "when", "while", "for", "with", "many", "some", "most", "other",
    "another", "both", "each", "our", "your", "their", "its", "overall",
    "however", "also", "popular", "top", "best", "leading",
})

NAME = r"[A-Z][a-zA-Z0-9]+(?:\s+[A-Z][a-zA-Z0-9]+)+"

COMPARISON_PATTERNS = [
    re.compile(
        rf"(?i:compared to|vs\.?|versus|alternative to|instead of|rather than)\s+({NAME})"
        r"(?=[.,;]|\s+(?i:is|are)\b|$)",
        re.MULTILINE,
    ),
    re.compile(
        rf"({NAME})\s+(?i:is|are)\s+(?i:a|an|another)\s+"
        r"(?i:good|popular|better|alternative|leading|major)\s+"
        r"(?i:option|choice|solution|company|service|platform|tool)"
    ),
    re.compile(
        rf"(?i:competitors?|alternatives?|similar|other)\s+(?i:include|are|like)\s+({NAME})"
    ),
]

COMPANY_PATTERNS = [
    re.compile(
        r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)+)\s+"
        r"(?:Inc|LLC|Ltd|Corp|Corporation|Company|Co|Group|Solutions|Services|"
        r"Technologies|Tech|Systems|Software|Digital|Media|Consulting|Partners|"
        r"Associates|Enterprises|Industries|International|Global|Worldwide)\b"
    ),
    re.compile(
        r"\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})\s+"
        r"(?:is|are|offers|provides|delivers|creates|develops|designs|builds|sells|manufactures)\s+"
        r"(?:a|an|the)\s+[a-z]+"
    ),
]

BRAND_SUFFIXES = (
    ".ch", ".com", ".de", " ag", " gmbh", " ltd", " inc", " corp",
    " company", " solutions", " technologies", " tech",
)

BRAND_DOMAIN = re.compile(r"^\.(ch|com|de|org|net|io|co|app|dev)$")


class CompetitorDetector:
    """Counts word-boundary, case-insensitive mentions of competitors."""

    def __init__(self, brand_name: str, competitors: List[str]):
        self.brand_name = brand_name.strip()
        self.competitors = []
        seen = set()
        for name in competitors:
            name = name.strip()
            key = name.lower()
            if not name or key in seen or self.is_brand_name(name):
                continue
            seen.add(key)
            self.competitors.append(name)
        self._patterns = {name: self._pattern(name) for name in self.competitors}

    @staticmethod
    def _pattern(name: str):
        return re.compile(rf"\b{re.escape(name)}\b", re.IGNORECASE)

    def is_brand_name(self, name: str) -> bool:
        """True if name is the brand under another spelling."""
        brand = self.brand_name.lower()
        candidate = name.lower().strip()
        if not brand:
            return False

        if candidate == brand or brand_domain_form(candidate) == brand_domain_form(brand):
            return True

        # "acmecorp.com" for brand "Acmecorp"
        first_word = brand.split()[0]
        if candidate.startswith(first_word) and BRAND_DOMAIN.match(candidate[len(first_word):]):
            return True

        compact = brand_domain_form(brand)
        return any(
            candidate in (brand + suffix, compact + suffix) for suffix in BRAND_SUFFIXES
        )

    def discover(self, text: str) -> List[str]:
        """Company names found in text, deduplicated, brand spellings excluded."""
        found: List[str] = []
        seen = {name.lower() for name in self.competitors}

        for pattern in COMPARISON_PATTERNS + COMPANY_PATTERNS:
            for match in pattern.finditer(text):
                name = " ".join(match.group(1).split())
                words = name.split(" ")
                if len(words) < 2 or not 4 <= len(name) < 50:
                    continue
                if words[0].lower() in COMMON_WORDS or name.lower() in COMMON_WORDS:
                    continue
                if name.lower() in seen or self.is_brand_name(name):
                    continue
                seen.add(name.lower())
                found.append(name)

        return found

    def count_mentions(self, text: str) -> Dict[str, int]:
        """
        Mention count per competitor.

        Named competitors are always included, with 0 when absent.
        Discovered competitors appear only in the answers that name them.
        """
        counts = {
            name: len(pattern.findall(text))
            for name, pattern in self._patterns.items()
        }
        for name in self.discover(text):
            count = len(self._pattern(name).findall(text))
            if count:
                counts[name] = count
        return counts
