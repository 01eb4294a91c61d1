"""Data models for normalized conversations and everything derived from them."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Platform = Literal["chatgpt", "claude", "gemini", "perplexity"]
DetectedPlatform = Literal["chatgpt", "claude", "gemini", "perplexity", "unknown"]
Role = Literal["user", "human", "assistant", "model"]
SimilarityKind = Literal["duplicate", "iteration", "unrelated"]


class Message(BaseModel):
    role: Role
    content: str
    timestamp: str


class Conversation(BaseModel):
    id: str
    title: str = "Untitled Conversation"
    platform: Platform
    messages: list[Message] = []

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @property
    def content_length(self) -> int:
        return sum(len(m.content) for m in self.messages)

    @property
    def start_timestamp(self) -> str | None:
        return self.messages[0].timestamp if self.messages else None


class ContentClassification(BaseModel):
    """Category/quality label carried alongside a conversation.

    Produced by an external classifier; the pipeline only passes it through.
    """

    category: str = "casual"
    quality: str = "draft"
    confidence: float = 0.0
    reasoning: str = "No classification applied"


class ValidationResult(BaseModel):
    is_valid: bool
    platform: DetectedPlatform
    confidence: float = Field(ge=0.0, le=1.0)
    issues: list[str] = []


class DateRange(BaseModel):
    earliest: str
    latest: str


class ParseMetadata(BaseModel):
    total_conversations: int
    skipped_conversations: int = 0
    date_range: DateRange
    platform: Platform
    export_version: str = "unknown"


class ParseResult(BaseModel):
    conversations: list[Conversation]
    metadata: ParseMetadata


class SimilarityResult(BaseModel):
    conversation_a: str
    conversation_b: str
    score: float = Field(ge=0.0, le=1.0)
    kind: SimilarityKind


class ChainVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    conversation: Conversation
    classification: ContentClassification
    version: int = Field(ge=1)
    timestamp: str
    changes: list[str] = []


class VersionChain(BaseModel):
    model_config = ConfigDict(frozen=True)

    project_name: str
    versions: list[ChainVersion] = Field(min_length=2)


class DedupResult(BaseModel):
    kept_conversations: list[Conversation] = []
    kept_classifications: list[ContentClassification] = []
    version_chains: list[VersionChain] = []
    duplicates_removed: int = 0
    version_chains_created: int = 0
    # Conversation ids per cluster, seed first, in sweep order.
    clusters: list[list[str]] = []


class Project(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    conversations: list[str]
    keywords: list[str]
    created: datetime
    description: str | None = None


class ProjectDetectionResult(BaseModel):
    projects: list[Project] = []
    unassigned: list[str] = []
