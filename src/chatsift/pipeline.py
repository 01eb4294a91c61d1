"""Batch pipeline: JSON export → detection → parsing → filtering → dedup → projects."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from .config import DedupOptions, ProjectOptions
from .dedup import process_conversations
from .detector import parse_export
from .exceptions import ExportLoadError
from .filters import FilterCriteria, filter_conversations
from .models import ContentClassification, DedupResult, ParseMetadata, ProjectDetectionResult
from .projects import auto_detect_projects

logger = logging.getLogger(__name__)


class PipelineResult(BaseModel):
    metadata: ParseMetadata
    selected_conversations: int
    deduplication: DedupResult
    projects: ProjectDetectionResult


def load_export(path: str | Path) -> Any:
    """Read and decode an export JSON file."""
    export_file = Path(path)
    if not export_file.exists():
        raise ExportLoadError(f"File not found: {export_file}")
    try:
        with export_file.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ExportLoadError(f"Could not read {export_file}: {e}") from e


def run_pipeline(
    data: Any,
    platform: str | None = None,
    criteria: FilterCriteria | None = None,
    dedup_options: DedupOptions | None = None,
    project_options: ProjectOptions | None = None,
) -> PipelineResult:
    """Run every core stage over an already-decoded export."""
    dedup_options = dedup_options or DedupOptions()
    parsed = parse_export(data, platform=platform)
    logger.info(
        "Parsed %d %s conversations (%d skipped)",
        parsed.metadata.total_conversations,
        parsed.metadata.platform,
        parsed.metadata.skipped_conversations,
    )

    conversations = parsed.conversations
    if criteria is not None and not criteria.is_empty:
        conversations = filter_conversations(conversations, criteria)
        logger.info("Selected %d of %d conversations", len(conversations), len(parsed.conversations))

    if dedup_options.is_active:
        dedup = process_conversations(conversations, None, dedup_options)
        logger.info(
            "Strategy %s: removed %d, created %d version chains",
            dedup_options.strategy,
            dedup.duplicates_removed,
            dedup.version_chains_created,
        )
    else:
        # keep-all without grouping: every conversation stays a standalone file
        dedup = DedupResult(
            kept_conversations=list(conversations),
            kept_classifications=[ContentClassification() for _ in conversations],
        )

    projects = auto_detect_projects(dedup.kept_conversations, project_options)
    return PipelineResult(
        metadata=parsed.metadata,
        selected_conversations=len(conversations),
        deduplication=dedup,
        projects=projects,
    )
