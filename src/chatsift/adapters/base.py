"""Adapter capability interface and helpers shared by the platform adapters."""

from __future__ import annotations

import base64
import logging
from collections.abc import Callable, Iterable
from typing import Any, Protocol

from ..models import Conversation, DateRange, ParseMetadata, ParseResult, Platform, ValidationResult
from ..timestamps import now_iso, sort_key

logger = logging.getLogger(__name__)


class Adapter(Protocol):
    """Translate one platform's export shape into canonical conversations.

    ``validate`` must never raise; ``parse`` raises ExportFormatError on data
    that does not validate.
    """

    platform: Platform
    supported_versions: tuple[str, ...]

    def validate(self, data: Any) -> ValidationResult: ...

    def parse(self, data: Any) -> ParseResult: ...


def invalid(issue: str, platform: str = "unknown", confidence: float = 0.0) -> ValidationResult:
    return ValidationResult(is_valid=False, platform=platform, confidence=confidence, issues=[issue])


def score_collection(
    entries: list[Any],
    is_valid_entry,
    platform: Platform,
    noun: str,
    describe=lambda entry: "unknown",
) -> ValidationResult:
    """Confidence for a collection export: the share of structurally valid entries."""
    issues: list[str] = []
    valid = 0
    for entry in entries:
        if is_valid_entry(entry):
            valid += 1
        else:
            issues.append(f"Invalid {noun} structure: {describe(entry)}")

    if valid == 0:
        return ValidationResult(
            is_valid=False,
            platform=platform,
            confidence=0.0,
            issues=[f"No valid {platform} {noun}s found", *issues],
        )

    confidence = valid / len(entries)
    return ValidationResult(
        is_valid=confidence > 0.5,
        platform=platform,
        confidence=confidence,
        issues=issues,
    )


def clean_content(content: str | list[str] | None) -> str:
    if isinstance(content, list):
        return "\n".join(p for p in content if isinstance(p, str)).strip()
    return (content or "").strip()


def generate_id(title: str, timestamp: str) -> str:
    """Deterministic id for conversations whose export carries none."""
    encoded = base64.b64encode(f"{title}-{timestamp}".encode("utf-8")).decode("ascii")
    return encoded[:12]


def build_result(
    conversations: list[Conversation],
    platform: Platform,
    export_version: str,
    total_entries: int,
    supported_versions: tuple[str, ...] = (),
) -> ParseResult:
    """Drop empty conversations and compute metadata for a parse."""
    if supported_versions and export_version != "unknown" and export_version not in supported_versions:
        logger.warning(
            "Unrecognized %s export version '%s' (known: %s), parsing anyway",
            platform,
            export_version,
            ", ".join(supported_versions),
        )
    kept = [c for c in conversations if c.messages]
    timestamps = sorted(
        (m.timestamp for c in kept for m in c.messages),
        key=sort_key,
    )
    return ParseResult(
        conversations=kept,
        metadata=ParseMetadata(
            total_conversations=len(kept),
            skipped_conversations=total_entries - len(kept),
            date_range=DateRange(
                earliest=timestamps[0] if timestamps else now_iso(),
                latest=timestamps[-1] if timestamps else now_iso(),
            ),
            platform=platform,
            export_version=export_version,
        ),
    )


def parse_entries(
    entries: Iterable[Any],
    is_valid_entry: Callable[[Any], bool],
    parse_entry: Callable[[Any], Conversation],
    describe: Callable[[Any], str],
) -> list[Conversation]:
    """Parse every structurally valid entry; one that still fails is logged and skipped."""
    conversations: list[Conversation] = []
    for entry in entries:
        if not is_valid_entry(entry):
            continue
        try:
            conversations.append(parse_entry(entry))
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Failed to parse conversation '%s'", describe(entry), exc_info=True)
    return conversations
