"""Token-overlap similarity between normalized conversations.

Scores are the Jaccard ratio of significant-word sets drawn from the title and
the leading messages of each conversation. Cheap and explainable rather than
semantically precise; the thresholds are the tuning knob.
"""

from __future__ import annotations

from collections.abc import Sequence

from .config import DUPLICATE_THRESHOLD, SIMILARITY_MESSAGE_WINDOW, SIMILARITY_THRESHOLD
from .keywords import conversation_text, significant_words
from .models import Conversation, SimilarityKind, SimilarityResult


def keyword_set(
    conversation: Conversation, window: int = SIMILARITY_MESSAGE_WINDOW
) -> frozenset[str]:
    return frozenset(significant_words(conversation_text(conversation, window)))


def _normalized_text(conversation: Conversation, window: int) -> str:
    return " ".join(conversation_text(conversation, window).lower().split())


def jaccard(a: frozenset[str], b: frozenset[str]) -> float | None:
    """Shared-over-union ratio, or None when both sets are empty."""
    union = a | b
    if not union:
        return None
    return len(a & b) / len(union)


def similarity(
    a: Conversation, b: Conversation, window: int = SIMILARITY_MESSAGE_WINDOW
) -> float:
    """Score in [0, 1]; commutative, and 1.0 for a conversation against itself."""
    score = jaccard(keyword_set(a, window), keyword_set(b, window))
    if score is None:
        # No significant words on either side: only identical text counts as similar
        return 1.0 if _normalized_text(a, window) == _normalized_text(b, window) else 0.0
    return score


def classify_score(
    score: float,
    similarity_threshold: float = SIMILARITY_THRESHOLD,
    duplicate_threshold: float = DUPLICATE_THRESHOLD,
) -> SimilarityKind:
    if score >= duplicate_threshold:
        return "duplicate"
    if score >= similarity_threshold:
        return "iteration"
    return "unrelated"


def compare(
    a: Conversation,
    b: Conversation,
    similarity_threshold: float = SIMILARITY_THRESHOLD,
    duplicate_threshold: float = DUPLICATE_THRESHOLD,
) -> SimilarityResult:
    score = similarity(a, b)
    return SimilarityResult(
        conversation_a=a.id,
        conversation_b=b.id,
        score=score,
        kind=classify_score(score, similarity_threshold, duplicate_threshold),
    )


class SimilarityIndex:
    """Pairwise scores over an immutable conversation arena, addressed by index.

    Keyword sets are computed once per conversation and pair scores are cached.
    """

    def __init__(self, conversations: Sequence[Conversation], window: int = SIMILARITY_MESSAGE_WINDOW):
        self.conversations = tuple(conversations)
        self.window = window
        self._keywords = [keyword_set(c, window) for c in self.conversations]
        self._scores: dict[tuple[int, int], float] = {}

    def __len__(self) -> int:
        return len(self.conversations)

    def keywords(self, i: int) -> frozenset[str]:
        return self._keywords[i]

    def score(self, i: int, j: int) -> float:
        if i == j:
            return 1.0
        key = (i, j) if i < j else (j, i)
        if key not in self._scores:
            value = jaccard(self._keywords[i], self._keywords[j])
            if value is None:
                a, b = self.conversations[i], self.conversations[j]
                same = _normalized_text(a, self.window) == _normalized_text(b, self.window)
                value = 1.0 if same else 0.0
            self._scores[key] = value
        return self._scores[key]
