"""Parse Perplexity exports (``threads`` arrays with citations)."""

from __future__ import annotations

from typing import Any

from ..exceptions import ExportFormatError
from ..models import Conversation, Message, ParseResult, ValidationResult
from ..timestamps import normalize_timestamp
from .base import build_result, clean_content, generate_id, invalid, parse_entries, score_collection


def _is_valid_message(msg: Any) -> bool:
    return (
        isinstance(msg, dict)
        and msg.get("role") in ("user", "assistant")
        and isinstance(msg.get("content"), str)
        and isinstance(msg.get("created_at"), str)
    )


def _is_valid_thread(thread: Any) -> bool:
    return (
        isinstance(thread, dict)
        and isinstance(thread.get("title"), str)
        and isinstance(thread.get("created_at"), str)
        and isinstance(thread.get("messages"), list)
        and all(_is_valid_message(m) for m in thread["messages"])
    )


def _with_citations(msg: dict[str, Any]) -> str:
    content = msg["content"]
    citations = [c for c in msg.get("citations") or [] if isinstance(c, str)]
    if citations:
        content += "\n\nCitations:\n" + "\n".join(
            f"[{i}] {citation}" for i, citation in enumerate(citations, start=1)
        )
    return content


def _describe(thread: Any) -> str:
    if isinstance(thread, dict):
        return str(thread.get("title") or "unknown title")
    return "unknown title"


class PerplexityAdapter:
    platform = "perplexity"
    supported_versions = ("1.0", "2024-01", "2025-01")

    def validate(self, data: Any) -> ValidationResult:
        if isinstance(data, list):
            threads = data
        elif isinstance(data, dict) and isinstance(data.get("threads"), list):
            threads = data["threads"]
        elif isinstance(data, dict):
            return invalid("Missing or invalid threads array")
        else:
            return invalid("Invalid JSON data")

        result = score_collection(threads, _is_valid_thread, "perplexity", "thread", _describe)
        if isinstance(data, list) and result.confidence == 0:
            return invalid("Array format found but no valid Perplexity thread structures")
        return result

    def parse(self, data: Any) -> ParseResult:
        validation = self.validate(data)
        if not validation.is_valid:
            raise ExportFormatError(
                "Invalid Perplexity export format: " + "; ".join(validation.issues)
            )

        if isinstance(data, list):
            threads, version = data, "2025-01"
        else:
            threads = data["threads"]
            info = data.get("export_info") if isinstance(data.get("export_info"), dict) else {}
            version = str(info.get("version") or "unknown")

        conversations = parse_entries(threads, _is_valid_thread, self._parse_thread, _describe)
        return build_result(
            conversations,
            "perplexity",
            version,
            total_entries=len(threads),
            supported_versions=self.supported_versions,
        )

    def _parse_thread(self, thread: dict[str, Any]) -> Conversation:
        title = thread["title"] or "Untitled Thread"
        thread_id = thread.get("thread_id")
        if thread_id in (None, ""):
            thread_id = generate_id(title, thread["created_at"])
        return Conversation(
            id=str(thread_id),
            title=title,
            platform="perplexity",
            messages=[
                Message(
                    role=msg["role"],
                    content=clean_content(_with_citations(msg)),
                    timestamp=normalize_timestamp(msg["created_at"]),
                )
                for msg in thread["messages"]
            ],
        )
