"""Cluster near-identical conversations and apply a retention strategy per cluster.

Conversations live in an immutable arena and are referenced by index; the only
state mutated during the sweep is the ``assigned`` flag array. Clustering is a
single greedy pass: each unassigned seed claims every still-unassigned
conversation scoring at or above the similarity threshold against it. A
conversation claimed by an early seed is never reconsidered for a later one, so
membership depends on sweep order.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from .config import DedupOptions
from .exceptions import ConfigurationError
from .keywords import project_name
from .models import (
    ChainVersion,
    ContentClassification,
    Conversation,
    DedupResult,
    SimilarityKind,
    VersionChain,
)
from .similarity import SimilarityIndex, classify_score
from .timestamps import now_iso, sort_key

logger = logging.getLogger(__name__)

# Relative content-length change below which a revision counts as unchanged in size
_LENGTH_CHANGE_RATIO = 0.1


@dataclass
class Cluster:
    """Indices into the arena; ``members[0]`` is the seed."""

    members: list[int]
    kinds: dict[int, SimilarityKind] = field(default_factory=dict)

    @property
    def seed(self) -> int:
        return self.members[0]

    def duplicate_group(self) -> list[int]:
        """The seed plus every member classified as its duplicate."""
        return [self.seed] + [m for m in self.members[1:] if self.kinds[m] == "duplicate"]

    def iterations(self) -> list[int]:
        return [m for m in self.members[1:] if self.kinds[m] == "iteration"]


def sweep_order(conversations: Sequence[Conversation], preserve_timeline: bool) -> list[int]:
    """Seed order for the greedy sweep: chronological (stable) or input order."""
    indices = list(range(len(conversations)))
    if preserve_timeline:
        indices.sort(key=lambda i: _start(conversations[i]))
    return indices


def build_clusters(
    index: SimilarityIndex,
    order: Sequence[int],
    similarity_threshold: float,
    duplicate_threshold: float,
) -> list[Cluster]:
    assigned = [False] * len(index)
    clusters: list[Cluster] = []

    for seed in order:
        if assigned[seed]:
            continue
        assigned[seed] = True
        cluster = Cluster(members=[seed])

        for other in order:
            if assigned[other]:
                continue
            score = index.score(seed, other)
            if score >= similarity_threshold:
                assigned[other] = True
                cluster.members.append(other)
                cluster.kinds[other] = classify_score(
                    score, similarity_threshold, duplicate_threshold
                )

        if len(cluster.members) == 1:
            cluster.kinds[seed] = "unrelated"
        elif len(cluster.duplicate_group()) > 1:
            cluster.kinds[seed] = "duplicate"
        else:
            cluster.kinds[seed] = "iteration"
        clusters.append(cluster)

    return clusters


def describe_changes(previous: Conversation | None, current: Conversation) -> list[str]:
    """Structural summary of one revision step: message-count and length deltas."""
    if previous is None:
        return ["initial version"]

    changes: list[str] = []
    delta = current.message_count - previous.message_count
    if delta:
        noun = "message" if abs(delta) == 1 else "messages"
        changes.append(f"{abs(delta)} {noun} {'added' if delta > 0 else 'removed'}")

    before, after = previous.content_length, current.content_length
    growth = (after - before) / max(before, 1)
    if growth > _LENGTH_CHANGE_RATIO:
        changes.append(f"content expanded (+{after - before} chars)")
    elif growth < -_LENGTH_CHANGE_RATIO:
        changes.append(f"content condensed ({after - before} chars)")

    if current.title != previous.title:
        changes.append(f"retitled from '{previous.title}'")

    return changes or ["minor revisions"]


def _start(conversation: Conversation) -> datetime:
    return sort_key(conversation.start_timestamp or now_iso())


def _latest(candidates: list[int], arena: Sequence[Conversation]) -> int:
    # Ties go to the later input position
    return max(candidates, key=lambda i: (_start(arena[i]), i))


def _best(candidates: list[int], arena: Sequence[Conversation]) -> int:
    """Highest message count, then the most recent, then the later input position."""
    return max(candidates, key=lambda i: (arena[i].message_count, _start(arena[i]), i))


def _build_chain(
    members: list[int],
    arena: Sequence[Conversation],
    classifications: Sequence[ContentClassification],
    index: SimilarityIndex,
) -> VersionChain:
    ordered = sorted(members, key=lambda i: (_start(arena[i]), i))
    shared = frozenset.intersection(*(index.keywords(i) for i in ordered))
    keywords = shared or frozenset.union(*(index.keywords(i) for i in ordered))

    versions: list[ChainVersion] = []
    previous: Conversation | None = None
    for rank, i in enumerate(ordered, start=1):
        conversation = arena[i]
        versions.append(
            ChainVersion(
                conversation=conversation,
                classification=classifications[i],
                version=rank,
                timestamp=conversation.start_timestamp or now_iso(),
                changes=describe_changes(previous, conversation),
            )
        )
        previous = conversation

    return VersionChain(
        project_name=project_name(keywords, (arena[i].title for i in ordered)),
        versions=versions,
    )


def process_conversations(
    conversations: Sequence[Conversation],
    classifications: Sequence[ContentClassification] | None = None,
    options: DedupOptions | None = None,
) -> DedupResult:
    """Cluster conversations and reduce or chain each cluster per ``options.strategy``.

    Never mutates its inputs. Kept conversations retain input order.
    """
    options = options or DedupOptions()
    arena = tuple(conversations)
    if not classifications:
        labels = tuple(ContentClassification() for _ in arena)
    elif len(classifications) != len(arena):
        raise ConfigurationError(
            f"Got {len(classifications)} classifications for {len(arena)} conversations"
        )
    else:
        labels = tuple(classifications)

    if not arena:
        return DedupResult()

    log = logger.info if options.verbose else logger.debug
    index = SimilarityIndex(arena)
    clusters = build_clusters(
        index,
        sweep_order(arena, options.preserve_timeline),
        options.similarity_threshold,
        options.duplicate_threshold,
    )

    dropped = [False] * len(arena)
    chained = [False] * len(arena)
    chains: list[VersionChain] = []

    for cluster in clusters:
        if len(cluster.members) < 2:
            continue

        group = cluster.duplicate_group()
        iterations = cluster.iterations()
        will_chain = options.chains_enabled and bool(iterations)

        if options.strategy in ("keep-latest", "merge-versions") and len(group) > 1:
            survivors = [_latest(group, arena)]
        elif options.strategy == "keep-best" and will_chain and len(group) > 1:
            survivors = [_best(group, arena)]
        elif options.strategy == "keep-best" and not will_chain:
            best = _best(cluster.members, arena)
            group = cluster.members
            survivors = [best]
        else:
            survivors = group

        for i in group:
            if i not in survivors:
                dropped[i] = True

        log(
            "Cluster '%s': %d members (%d duplicate, %d iteration), kept %s",
            arena[cluster.seed].title,
            len(cluster.members),
            len(cluster.duplicate_group()) - 1,
            len(iterations),
            [arena[i].id for i in survivors],
        )

        if will_chain:
            chain = _build_chain(survivors + iterations, arena, labels, index)
            chains.append(chain)
            for i in survivors + iterations:
                chained[i] = True
            log("Version chain '%s' with %d versions", chain.project_name, len(chain.versions))

    moved_to_chain = options.strategy == "merge-versions"
    kept = [
        i
        for i in range(len(arena))
        if not dropped[i] and not (moved_to_chain and chained[i])
    ]

    return DedupResult(
        kept_conversations=[arena[i] for i in kept],
        kept_classifications=[labels[i] for i in kept],
        version_chains=chains,
        duplicates_removed=sum(dropped),
        version_chains_created=len(chains),
        clusters=[[arena[i].id for i in cluster.members] for cluster in clusters],
    )
