"""Central configuration: defaults, option models and application info."""

from __future__ import annotations

import os
from dataclasses import dataclass
from importlib import metadata
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigurationError


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


# Deduplication thresholds, override with CHATSIFT_* env vars
SIMILARITY_THRESHOLD = _env_float("CHATSIFT_SIMILARITY_THRESHOLD", 0.6)
DUPLICATE_THRESHOLD = _env_float("CHATSIFT_DUPLICATE_THRESHOLD", 0.8)

# Platform detection
DETECTION_CONFIDENCE = 0.7  # Minimum adapter confidence to accept a match

# Similarity engine
SIMILARITY_MESSAGE_WINDOW = 5  # Leading messages that feed the keyword bag
MIN_WORD_LENGTH = 4

# Project detection
KEYWORD_THRESHOLD = _env_int("CHATSIFT_KEYWORD_THRESHOLD", 3)
MIN_CONVERSATIONS = _env_int("CHATSIFT_MIN_CONVERSATIONS", 2)
PROJECT_MESSAGE_WINDOW = 3
MAX_KEYWORDS = 20  # Most frequent words kept per conversation
PROJECT_KEYWORDS_KEPT = 10

Strategy = Literal["keep-all", "keep-latest", "keep-best", "merge-versions"]


class DedupOptions(BaseModel):
    strategy: Strategy = "keep-all"
    similarity_threshold: float = Field(default=SIMILARITY_THRESHOLD, ge=0.0, le=1.0)
    duplicate_threshold: float = Field(default=DUPLICATE_THRESHOLD, ge=0.0, le=1.0)
    preserve_timeline: bool = True
    group_iterations: bool = False
    verbose: bool = False

    @model_validator(mode="after")
    def check_threshold_order(self) -> DedupOptions:
        if self.similarity_threshold > self.duplicate_threshold:
            raise ValueError("similarity_threshold must not exceed duplicate_threshold")
        return self

    @property
    def is_active(self) -> bool:
        """Whether deduplication changes anything beyond keeping every conversation."""
        return self.group_iterations or self.strategy != "keep-all"

    @property
    def chains_enabled(self) -> bool:
        return self.group_iterations or self.strategy == "merge-versions"


class ProjectOptions(BaseModel):
    keyword_threshold: int = Field(default=KEYWORD_THRESHOLD, ge=1)
    min_conversations: int = Field(default=MIN_CONVERSATIONS, ge=1)


def build_dedup_options(**values) -> DedupOptions:
    """Build DedupOptions, surfacing pydantic errors as ConfigurationError."""
    try:
        return DedupOptions(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


def build_project_options(**values) -> ProjectOptions:
    try:
        return ProjectOptions(**values)
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e


@dataclass(frozen=True)
class AppInfo:
    """Name and version of the installed distribution, read once at startup."""

    name: str
    version: str

    @classmethod
    def load(cls, distribution: str = "chatsift") -> AppInfo:
        try:
            version = metadata.version(distribution)
        except metadata.PackageNotFoundError:
            version = "0.0.0+unknown"
        return cls(name=distribution, version=version)
