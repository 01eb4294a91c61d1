"""chatsift: normalize, deduplicate and group AI chat exports."""

from .dedup import process_conversations
from .detector import detect_platform, parse_export
from .models import Conversation, DedupResult, Message, VersionChain
from .projects import auto_detect_projects
from .similarity import similarity

__all__ = [
    "Conversation",
    "DedupResult",
    "Message",
    "VersionChain",
    "auto_detect_projects",
    "detect_platform",
    "parse_export",
    "process_conversations",
    "similarity",
]
