"""Group conversations into projects by shared keywords, for directory organization.

Independent of version chains: a conversation can sit in a chain and a project.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone

from .config import PROJECT_KEYWORDS_KEPT, ProjectOptions
from .keywords import extract_keywords, project_name
from .models import Conversation, Project, ProjectDetectionResult

logger = logging.getLogger(__name__)


def auto_detect_projects(
    conversations: Sequence[Conversation],
    options: ProjectOptions | None = None,
) -> ProjectDetectionResult:
    """Greedy keyword clustering; clusters below ``min_conversations`` stay unassigned."""
    options = options or ProjectOptions()
    arena = tuple(conversations)
    keywords = [extract_keywords(c) for c in arena]
    keyword_sets = [set(k) for k in keywords]
    assigned = [False] * len(arena)
    projects: list[Project] = []

    for seed in range(len(arena)):
        if assigned[seed]:
            continue

        related = [seed]
        # Insertion-ordered union of member keywords
        merged = dict.fromkeys(keywords[seed])

        for other in range(len(arena)):
            if other == seed or assigned[other]:
                continue
            common = keyword_sets[seed] & keyword_sets[other]
            if len(common) >= options.keyword_threshold:
                related.append(other)
                merged.update(dict.fromkeys(keywords[other]))

        if len(related) < options.min_conversations:
            continue

        for i in related:
            assigned[i] = True

        project = Project(
            name=project_name(merged, (arena[i].title for i in related)),
            conversations=[arena[i].id for i in related],
            keywords=list(merged)[:PROJECT_KEYWORDS_KEPT],
            created=datetime.now(timezone.utc),
        )
        logger.debug("Project '%s' with %d conversations", project.name, len(related))
        projects.append(project)

    unassigned = [arena[i].id for i in range(len(arena)) if not assigned[i]]
    return ProjectDetectionResult(projects=projects, unassigned=unassigned)
