"""Keyword extraction and naming shared by similarity scoring and project detection."""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable

from .config import MAX_KEYWORDS, MIN_WORD_LENGTH, PROJECT_MESSAGE_WINDOW
from .models import Conversation

STOP_WORDS = frozenset(
    """
    the a an and or but in on at to for of with by from up about into through during
    before after above below between out over under again then once here there
    i you he she it we they me him her us them my your his its our their
    this that these those what which who whom when where why how
    can could should would will shall may might must
    is are was were be been being have has had do does did
    just also very really some such only than too more most other any each both few
    all not no nor own same so yes please thanks thank like want need make know think
    """.split()
)

_WORD_RE = re.compile(r"\b[a-z]+\b")
_CAPITALIZED_RE = re.compile(r"\b[A-Z][a-z]+\b")

# Checked in order against member titles before keyword-derived naming
_TITLE_PROJECTS = (
    (re.compile(r"\b(novel|book)", re.IGNORECASE), "Novel Project"),
    (re.compile(r"\b(screenplay|script)", re.IGNORECASE), "Screenplay Project"),
    (re.compile(r"\b(article|blog)", re.IGNORECASE), "Article Writing"),
    (re.compile(r"\b(poem|poetry)", re.IGNORECASE), "Poetry Collection"),
)


def is_significant(word: str) -> bool:
    return len(word) >= MIN_WORD_LENGTH and word not in STOP_WORDS


def significant_words(text: str) -> list[str]:
    """Lowercased alphabetic tokens longer than three letters, minus stop words."""
    return [w for w in _WORD_RE.findall(text.lower()) if is_significant(w)]


def conversation_text(conversation: Conversation, window: int) -> str:
    """Title followed by the content of the first ``window`` messages."""
    parts = [conversation.title]
    parts.extend(m.content for m in conversation.messages[:window])
    return " ".join(parts)


def extract_keywords(
    conversation: Conversation,
    max_keywords: int = MAX_KEYWORDS,
    window: int = PROJECT_MESSAGE_WINDOW,
) -> list[str]:
    """Most frequent significant words plus capitalized words, in a stable order.

    Capitalized words stand in for proper nouns and technology names.
    """
    text = conversation_text(conversation, window)
    counts = Counter(significant_words(text))
    keywords = [word for word, _ in counts.most_common(max_keywords)]

    seen = set(keywords)
    for word in _CAPITALIZED_RE.findall(text):
        lowered = word.lower()
        if lowered not in seen and is_significant(lowered):
            keywords.append(lowered)
            seen.add(lowered)

    return keywords


def title_project_name(titles: Iterable[str]) -> str | None:
    for title in titles:
        for pattern, name in _TITLE_PROJECTS:
            if pattern.search(title):
                return name
    return None


def keyword_project_name(keywords: Iterable[str]) -> str:
    """Title-cased longest one to three keywords, suffixed with ``Project``."""
    longest = sorted(set(keywords), key=lambda w: (-len(w), w))[:3]
    if not longest:
        return "Untitled Project"
    return " ".join(w.capitalize() for w in longest) + " Project"


def project_name(keywords: Iterable[str], titles: Iterable[str] = ()) -> str:
    return title_project_name(titles) or keyword_project_name(keywords)
