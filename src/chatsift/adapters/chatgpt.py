"""Parse ChatGPT exports: node-graph ``mapping`` conversations into flat message lists."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..exceptions import ExportFormatError
from ..models import Conversation, Message, ParseResult, Role, ValidationResult
from ..timestamps import normalize_timestamp, parse_timestamp
from .base import build_result, generate_id, invalid, parse_entries, score_collection

logger = logging.getLogger(__name__)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)

_ROLES: dict[str, Role] = {
    "user": "user",
    "assistant": "assistant",
    "system": "assistant",
    "tool": "assistant",
}


def _is_valid_conversation(conv: Any) -> bool:
    return (
        isinstance(conv, dict)
        and isinstance(conv.get("mapping"), dict)
        and isinstance(conv.get("title", ""), (str, type(None)))
    )


def _part_has_content(part: Any) -> bool:
    if isinstance(part, str):
        return bool(part.strip())
    if isinstance(part, dict):
        if isinstance(part.get("text"), str):
            return bool(part["text"].strip())
        if isinstance(part.get("content"), str):
            return bool(part["content"].strip())
        # Canvas, audio and image objects render as placeholders
        return True
    return False


def _flatten_part(part: Any) -> str | None:
    """Render one content part as text, using placeholders for media objects."""
    if isinstance(part, str):
        return part
    if not isinstance(part, dict):
        return None

    content_type = part.get("content_type") or ""
    if content_type == "audio_transcription":
        return f"[Audio: {part.get('text') or 'Audio message'}]"
    if part.get("text"):
        return part["text"]

    content = part.get("content")
    if isinstance(content, str) and content:
        return content
    if isinstance(content, dict):
        return f"[Document: {part.get('name') or 'Untitled'}]"

    if "audio" in content_type:
        return "[Audio message]"
    if "video" in content_type:
        return "[Video message]"
    if "image" in content_type:
        return "[Image]"
    return f"[{content_type or 'Attachment'}]"


def _flatten_parts(parts: list[Any]) -> str:
    rendered = (_flatten_part(p) for p in parts)
    return "\n".join(text for text in rendered if text is not None).strip()


def _create_time(msg: dict[str, Any]) -> datetime:
    # Epoch numbers and date strings both appear; missing values sort first
    return parse_timestamp(msg.get("create_time")) or _EARLIEST


def _extract_messages(mapping: dict[str, Any]) -> list[dict[str, Any]]:
    """Collect every node carrying a non-empty message, sorted by create_time.

    Mapping order is not chronological, so nodes are never walked by parent pointers here.
    """
    messages: list[dict[str, Any]] = []

    for node in mapping.values():
        if not isinstance(node, dict):
            continue
        msg = node.get("message")
        if not isinstance(msg, dict) or not isinstance(msg.get("author"), dict):
            continue
        content = msg.get("content")
        if not isinstance(content, dict):
            continue
        parts = content.get("parts")
        if not isinstance(parts, list) or not parts:
            continue
        if any(_part_has_content(p) for p in parts):
            messages.append(msg)

    messages.sort(key=_create_time)
    return messages


class ChatGPTAdapter:
    platform = "chatgpt"
    supported_versions = ("2023-12", "2024-06", "2025-01")

    def validate(self, data: Any) -> ValidationResult:
        if not isinstance(data, (dict, list)):
            return invalid("Invalid JSON data")

        issues: list[str] = []

        # Newest format: bare array of conversations
        if isinstance(data, list):
            result = score_collection(
                data, _is_valid_conversation, "chatgpt", "conversation", _describe
            )
            if result.confidence > 0:
                return result
            return invalid("Array format found but no valid ChatGPT conversation structures")

        # Bulk format: object with a conversations array
        if isinstance(data.get("conversations"), list):
            result = score_collection(
                data["conversations"], _is_valid_conversation, "chatgpt", "conversation", _describe
            )
            if result.confidence > 0:
                return result
            issues.append("Conversations array found but no valid mapping structures")

        # Legacy format: a single conversation with a mapping
        if isinstance(data.get("mapping"), dict):
            return ValidationResult(is_valid=True, platform="chatgpt", confidence=0.9)

        if data.get("title") or data.get("create_time"):
            issues.append("Some ChatGPT-like properties found but missing mapping structure")
            return ValidationResult(
                is_valid=False, platform="chatgpt", confidence=0.3, issues=issues
            )

        return ValidationResult(
            is_valid=False,
            platform="unknown",
            confidence=0.0,
            issues=issues or ["No ChatGPT format indicators found"],
        )

    def parse(self, data: Any) -> ParseResult:
        validation = self.validate(data)
        if not validation.is_valid:
            raise ExportFormatError(
                "No valid ChatGPT conversation data found: " + "; ".join(validation.issues)
            )

        if isinstance(data, list):
            entries, version = data, "2025-01"
        elif isinstance(data.get("conversations"), list) and not isinstance(data.get("mapping"), dict):
            entries, version = data["conversations"], "2024-06"
        else:
            entries = [
                {
                    "title": data.get("title"),
                    "create_time": data.get("create_time"),
                    "mapping": data["mapping"],
                    "conversation_id": data.get("conversation_id") or data.get("id"),
                }
            ]
            version = "2023-12" if data.get("title") else "unknown"

        conversations = parse_entries(
            entries, _is_valid_conversation, self._parse_conversation, _describe
        )
        return build_result(
            conversations,
            "chatgpt",
            version,
            total_entries=len(entries),
            supported_versions=self.supported_versions,
        )

    def _parse_conversation(self, conv: dict[str, Any]) -> Conversation:
        title = conv.get("title") or "Untitled Conversation"
        messages: list[Message] = []

        for msg in _extract_messages(conv["mapping"]):
            text = _flatten_parts(msg["content"]["parts"])
            if not text:
                continue
            role = str(msg["author"].get("role") or "user").lower()
            messages.append(
                Message(
                    role=_ROLES.get(role, "user"),
                    content=text,
                    timestamp=normalize_timestamp(msg.get("create_time")),
                )
            )

        if not messages:
            logger.debug("Conversation '%s' has no extractable messages, skipping", title)

        conv_id = (
            conv.get("conversation_id")
            or conv.get("id")
            or generate_id(title, str(conv.get("create_time") or ""))
        )
        return Conversation(id=str(conv_id), title=title, platform="chatgpt", messages=messages)


def _describe(conv: Any) -> str:
    if isinstance(conv, dict):
        return str(conv.get("conversation_id") or conv.get("id") or conv.get("title") or "unknown ID")
    return "unknown ID"
