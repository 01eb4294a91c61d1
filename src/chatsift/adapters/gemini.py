"""Parse Google Gemini exports (``chats`` arrays)."""

from __future__ import annotations

from typing import Any

from ..exceptions import ExportFormatError
from ..models import Conversation, Message, ParseResult, ValidationResult
from ..timestamps import normalize_timestamp
from .base import build_result, clean_content, generate_id, invalid, parse_entries, score_collection


def _is_valid_message(msg: Any) -> bool:
    return (
        isinstance(msg, dict)
        and msg.get("author") in ("user", "model")
        and isinstance(msg.get("text"), str)
        and isinstance(msg.get("timestamp"), str)
    )


def _is_valid_chat(chat: Any) -> bool:
    return (
        isinstance(chat, dict)
        and isinstance(chat.get("title"), str)
        and isinstance(chat.get("create_time"), str)
        and isinstance(chat.get("messages"), list)
        and all(_is_valid_message(m) for m in chat["messages"])
    )


def _describe(chat: Any) -> str:
    if isinstance(chat, dict):
        return str(chat.get("title") or "unknown title")
    return "unknown title"


class GeminiAdapter:
    platform = "gemini"
    supported_versions = ("1.0", "2024-01", "2025-01")

    def validate(self, data: Any) -> ValidationResult:
        if isinstance(data, list):
            chats = data
        elif isinstance(data, dict) and isinstance(data.get("chats"), list):
            chats = data["chats"]
        elif isinstance(data, dict):
            return invalid("Missing or invalid chats array")
        else:
            return invalid("Invalid JSON data")

        result = score_collection(chats, _is_valid_chat, "gemini", "chat", _describe)
        if isinstance(data, list) and result.confidence == 0:
            return invalid("Array format found but no valid Gemini chat structures")
        return result

    def parse(self, data: Any) -> ParseResult:
        validation = self.validate(data)
        if not validation.is_valid:
            raise ExportFormatError("Invalid Gemini export format: " + "; ".join(validation.issues))

        if isinstance(data, list):
            chats, version = data, "2025-01"
        else:
            chats = data["chats"]
            meta = data.get("export_metadata") if isinstance(data.get("export_metadata"), dict) else {}
            version = str(meta.get("version") or "unknown")

        conversations = parse_entries(chats, _is_valid_chat, self._parse_chat, _describe)
        return build_result(
            conversations,
            "gemini",
            version,
            total_entries=len(chats),
            supported_versions=self.supported_versions,
        )

    def _parse_chat(self, chat: dict[str, Any]) -> Conversation:
        title = chat["title"] or "Untitled Chat"
        chat_id = chat.get("chat_id")
        if chat_id in (None, ""):
            chat_id = generate_id(title, chat["create_time"])
        return Conversation(
            id=str(chat_id),
            title=title,
            platform="gemini",
            messages=[
                Message(
                    role=msg["author"],
                    content=clean_content(msg["text"]),
                    timestamp=normalize_timestamp(msg["timestamp"]),
                )
                for msg in chat["messages"]
            ],
        )
