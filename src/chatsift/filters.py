"""Select a subset of parsed conversations before deduplication."""

from __future__ import annotations

import random
from collections.abc import Sequence
from datetime import date, datetime, timezone

from pydantic import BaseModel, Field

from .models import Conversation
from .timestamps import parse_timestamp


class FilterCriteria(BaseModel):
    after: date | None = None
    before: date | None = None
    contains: str | None = None
    first: int | None = Field(default=None, ge=0)
    last: int | None = Field(default=None, ge=0)
    sample: int | None = Field(default=None, ge=0)
    seed: int = 0

    @property
    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.after, self.before, self.contains, self.first, self.last, self.sample)
        )


def _start_date(conversation: Conversation) -> date | None:
    dt = parse_timestamp(conversation.start_timestamp)
    return dt.date() if dt else None


def _chronological_key(conversation: Conversation) -> tuple[bool, datetime]:
    dt = parse_timestamp(conversation.start_timestamp)
    # Undated conversations sort last
    return (dt is None, dt or datetime.min.replace(tzinfo=timezone.utc))


def _matches(conversation: Conversation, needle: str) -> bool:
    if needle in conversation.title.lower():
        return True
    return any(needle in m.content.lower() for m in conversation.messages)


def filter_conversations(
    conversations: Sequence[Conversation], criteria: FilterCriteria
) -> list[Conversation]:
    """Apply date, text, and count filters in that order; returns a new list.

    ``first``/``last`` pick chronologically. Undated conversations fail date bounds.
    """
    selected = list(conversations)

    if criteria.after or criteria.before:
        dated = [(c, _start_date(c)) for c in selected]
        selected = [
            c
            for c, day in dated
            if day is not None
            and (criteria.after is None or day > criteria.after)
            and (criteria.before is None or day < criteria.before)
        ]

    if criteria.contains:
        needle = criteria.contains.lower()
        selected = [c for c in selected if _matches(c, needle)]

    if criteria.first is not None or criteria.last is not None:
        chronological = sorted(selected, key=_chronological_key)
        if criteria.first is not None:
            chronological = chronological[: criteria.first]
        if criteria.last is not None:
            chronological = chronological[-criteria.last :] if criteria.last else []
        keep = {id(c) for c in chronological}
        selected = [c for c in selected if id(c) in keep]

    if criteria.sample is not None and criteria.sample < len(selected):
        rng = random.Random(criteria.seed)
        picked = set(rng.sample(range(len(selected)), criteria.sample))
        selected = [c for i, c in enumerate(selected) if i in picked]

    return selected
