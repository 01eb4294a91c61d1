"""Parse Claude.ai exports, both the legacy flat-message shape and current chat_messages arrays."""

from __future__ import annotations

from typing import Any

from ..exceptions import ExportFormatError
from ..models import Conversation, Message, ParseResult, ValidationResult
from ..timestamps import normalize_timestamp
from .base import build_result, clean_content, invalid, parse_entries, score_collection

_SENDERS = ("human", "assistant")


def _is_valid_legacy_message(msg: Any) -> bool:
    return (
        isinstance(msg, dict)
        and msg.get("role") in _SENDERS
        and isinstance(msg.get("content"), str)
        and isinstance(msg.get("timestamp"), str)
    )


def _is_valid_legacy_conversation(conv: Any) -> bool:
    return (
        isinstance(conv, dict)
        and isinstance(conv.get("id"), str)
        and isinstance(conv.get("name"), str)
        and isinstance(conv.get("created_at"), str)
        and isinstance(conv.get("messages"), list)
        and all(_is_valid_legacy_message(m) for m in conv["messages"])
    )


def _is_valid_current_message(msg: Any) -> bool:
    return (
        isinstance(msg, dict)
        and msg.get("sender") in _SENDERS
        and isinstance(msg.get("created_at"), str)
        and (isinstance(msg.get("text"), str) or isinstance(msg.get("content"), list))
    )


def _is_valid_current_conversation(conv: Any) -> bool:
    return (
        isinstance(conv, dict)
        and isinstance(conv.get("uuid"), str)
        and isinstance(conv.get("name"), str)
        and isinstance(conv.get("created_at"), str)
        and isinstance(conv.get("chat_messages"), list)
        and all(_is_valid_current_message(m) for m in conv["chat_messages"])
    )


def _current_message_text(msg: dict[str, Any]) -> str:
    """Primary ``text`` field, else the newline-joined text blocks of ``content``."""
    text = msg.get("text")
    if isinstance(text, str) and text.strip():
        body = clean_content(text)
    else:
        blocks = msg.get("content") or []
        body = clean_content(
            [
                block["text"]
                for block in blocks
                if isinstance(block, dict) and block.get("type") == "text" and block.get("text")
            ]
        )

    extras: list[str] = []
    for attachment in msg.get("attachments") or []:
        if not isinstance(attachment, dict):
            continue
        name = attachment.get("file_name") or "Untitled"
        extracted = attachment.get("extracted_content")
        extracted = extracted.strip() if isinstance(extracted, str) else ""
        extras.append(f"[Attachment: {name}]\n{extracted}" if extracted else f"[Attachment: {name}]")
    for file in msg.get("files") or []:
        if isinstance(file, dict):
            extras.append(f"[File: {file.get('file_name') or 'Untitled'}]")

    return "\n\n".join(part for part in [body, *extras] if part)


def _describe(conv: Any) -> str:
    if isinstance(conv, dict):
        return str(conv.get("id") or conv.get("uuid") or "unknown ID")
    return "unknown ID"


class ClaudeAdapter:
    platform = "claude"
    supported_versions = ("1.0", "1.1", "2.0", "2025-01")

    def validate(self, data: Any) -> ValidationResult:
        if not isinstance(data, (dict, list)):
            return invalid("Invalid JSON data")

        # Current format: bare array of conversations with chat_messages
        if isinstance(data, list):
            result = score_collection(
                data, _is_valid_current_conversation, "claude", "conversation", _describe
            )
            if result.confidence > 0:
                return result
            return invalid("Array format found but no valid Claude conversation structures")

        if not isinstance(data.get("conversations"), list):
            return invalid("Missing or invalid conversations array")

        return score_collection(
            data["conversations"], _is_valid_legacy_conversation, "claude", "conversation", _describe
        )

    def parse(self, data: Any) -> ParseResult:
        validation = self.validate(data)
        if not validation.is_valid:
            raise ExportFormatError("Invalid Claude export format: " + "; ".join(validation.issues))

        if isinstance(data, list):
            conversations = parse_entries(
                data, _is_valid_current_conversation, self._parse_current, _describe
            )
            return build_result(
                conversations,
                "claude",
                "2025-01",
                total_entries=len(data),
                supported_versions=self.supported_versions,
            )

        entries = data["conversations"]
        conversations = parse_entries(
            entries, _is_valid_legacy_conversation, self._parse_legacy, _describe
        )
        export_info = data.get("export_info") if isinstance(data.get("export_info"), dict) else {}
        return build_result(
            conversations,
            "claude",
            str(export_info.get("version") or "unknown"),
            total_entries=len(entries),
            supported_versions=self.supported_versions,
        )

    def _parse_legacy(self, conv: dict[str, Any]) -> Conversation:
        return Conversation(
            id=str(conv["id"]),
            title=conv["name"] or "Untitled Conversation",
            platform="claude",
            messages=[
                Message(
                    role=msg["role"],
                    content=clean_content(msg["content"]),
                    timestamp=normalize_timestamp(msg["timestamp"]),
                )
                for msg in conv["messages"]
            ],
        )

    def _parse_current(self, conv: dict[str, Any]) -> Conversation:
        return Conversation(
            id=str(conv["uuid"]),
            title=conv["name"] or "Untitled Conversation",
            platform="claude",
            messages=[
                Message(
                    role=msg["sender"],
                    content=_current_message_text(msg),
                    timestamp=normalize_timestamp(msg["created_at"]),
                )
                for msg in conv["chat_messages"]
            ],
        )
