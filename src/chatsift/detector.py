"""Pick the adapter that understands an export of unknown origin."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from .adapters import ADAPTERS, Adapter, get_adapter
from .config import DETECTION_CONFIDENCE
from .exceptions import UnknownPlatformError
from .models import ParseResult, ValidationResult

logger = logging.getLogger(__name__)

# Fallback signatures: top-level key -> platform it usually belongs to
_SIGNATURES = (
    ("mapping", "chatgpt", dict),
    ("conversations", "claude", list),
    ("chats", "gemini", list),
    ("threads", "perplexity", list),
)


def _entry_platform(entry: Any) -> str | None:
    """Platform an array entry looks like, judged by its keys alone."""
    if not isinstance(entry, dict):
        return None
    if "mapping" in entry:
        return "chatgpt"
    if "chat_messages" in entry:
        return "claude"
    if "messages" in entry and "create_time" in entry:
        return "gemini"
    if "messages" in entry and "created_at" in entry:
        return "perplexity"
    return None


def _sniff_entries(entries: list[Any]) -> ValidationResult | None:
    votes = Counter(p for p in map(_entry_platform, entries) if p is not None)
    if not votes:
        return None
    platform, count = votes.most_common(1)[0]
    issues = []
    if count < len(entries):
        issues.append(f"{len(entries) - count} of {len(entries)} entries do not look like {platform} data")
    return ValidationResult(
        is_valid=True, platform=platform, confidence=count / len(entries), issues=issues
    )


def sniff_platform(data: Any) -> ValidationResult:
    """Structural guess from top-level keys, or from entry keys for a bare array.

    The chosen adapter still validates the export before parsing it.
    """
    if isinstance(data, list):
        sniffed = _sniff_entries(data)
        if sniffed is not None:
            return sniffed
    if isinstance(data, dict):
        for key, platform, kind in _SIGNATURES:
            value = data.get(key)
            if not isinstance(value, kind):
                continue
            # Bulk ChatGPT exports share the conversations key with legacy Claude
            if key == "conversations" and any(
                isinstance(c, dict) and "mapping" in c for c in value
            ):
                platform = "chatgpt"
            return ValidationResult(is_valid=True, platform=platform, confidence=0.9)
    return ValidationResult(
        is_valid=False,
        platform="unknown",
        confidence=0.0,
        issues=["Unknown export format - no recognizable structure found"],
    )


def detect_platform(data: Any, adapters: tuple[Adapter, ...] = ADAPTERS) -> ValidationResult:
    """Return the first adapter validation clearing the confidence bar.

    Adapters are tried in registration order; scores are not compared across adapters.
    """
    for adapter in adapters:
        result = adapter.validate(data)
        if result.is_valid and result.confidence > DETECTION_CONFIDENCE:
            return result
        logger.debug(
            "%s adapter rejected export (confidence %.2f): %s",
            adapter.platform,
            result.confidence,
            result.issues,
        )

    return sniff_platform(data)


def auto_select_adapter(data: Any) -> tuple[Adapter, ValidationResult] | None:
    validation = detect_platform(data)
    if not validation.is_valid:
        return None
    adapter = get_adapter(validation.platform)
    if adapter is None:
        return None
    return adapter, validation


def parse_export(data: Any, platform: str | None = None) -> ParseResult:
    """Detect the platform (unless forced) and parse the export.

    Raises UnknownPlatformError when nothing recognizes the data.
    """
    if platform:
        adapter = get_adapter(platform)
        if adapter is None:
            raise UnknownPlatformError(f"Unsupported platform: {platform}")
        return adapter.parse(data)

    selected = auto_select_adapter(data)
    if selected is None:
        raise UnknownPlatformError("Unable to detect platform or find appropriate parser")

    adapter, validation = selected
    logger.info(
        "Detected platform: %s (confidence: %.1f%%)",
        validation.platform,
        validation.confidence * 100,
    )
    if validation.issues:
        logger.warning("Validation issues: %s", validation.issues)

    return adapter.parse(data)
