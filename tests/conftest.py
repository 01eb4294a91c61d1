"""Shared fixtures: export payloads for each platform and a conversation factory."""

import json

import pytest

from chatsift.models import Conversation, Message


def _conversation(conv_id, title, contents, start="2024-01-01T00:00:00.000Z", platform="claude"):
    return Conversation(
        id=conv_id,
        title=title,
        platform=platform,
        messages=[
            Message(role="human" if i % 2 == 0 else "assistant", content=text, timestamp=start)
            for i, text in enumerate(contents)
        ],
    )


@pytest.fixture
def make_conversation():
    return _conversation


BASE_WORDS = "alpha bravo charlie delta echo foxtrot golf hotel india juliet"


@pytest.fixture
def iteration_versions():
    """Three revisions of one draft; each later one scores as an iteration of the first."""
    v1 = _conversation("v1", "Chapter outline", [BASE_WORDS], start="2024-01-01T00:00:00.000Z")
    v2 = _conversation(
        "v2",
        "Chapter outline",
        [BASE_WORDS, "kilo lima mike sierra"],
        start="2024-01-02T00:00:00.000Z",
    )
    v3 = _conversation(
        "v3",
        "Chapter outline",
        [BASE_WORDS, "november oscar papa quebec", "romeo"],
        start="2024-01-03T00:00:00.000Z",
    )
    return v1, v2, v3


@pytest.fixture
def chatgpt_legacy():
    return {
        "mapping": {
            "uuid1": {
                "id": "uuid1",
                "message": {
                    "id": "msg1",
                    "author": {"role": "user"},
                    "content": {"parts": ["Hello there"]},
                    "create_time": 1640995200,
                },
                "children": [],
            }
        },
        "title": "Test Conversation",
        "create_time": 1640995200,
    }


def chatgpt_conversation(conv_id="conv-1", title="Graph order"):
    """Mapping listed out of chronological order, with empty and message-less nodes."""
    return {
        "conversation_id": conv_id,
        "title": title,
        "create_time": 1700000000,
        "mapping": {
            "root": {"id": "root", "message": None, "parent": None, "children": ["c"]},
            "c": {
                "id": "c",
                "message": {
                    "author": {"role": "assistant"},
                    "content": {"content_type": "text", "parts": ["Third"]},
                    "create_time": 1700000300,
                },
                "parent": "b",
                "children": [],
            },
            "a": {
                "id": "a",
                "message": {
                    "author": {"role": "user"},
                    "content": {"content_type": "text", "parts": ["First"]},
                    "create_time": 1700000100,
                },
                "parent": "root",
                "children": ["b"],
            },
            "empty": {
                "id": "empty",
                "message": {
                    "author": {"role": "system"},
                    "content": {"content_type": "text", "parts": [""]},
                    "create_time": 1700000050,
                },
                "parent": "root",
                "children": [],
            },
            "b": {
                "id": "b",
                "message": {
                    "author": {"role": "system"},
                    "content": {"content_type": "text", "parts": ["Second"]},
                    "create_time": 1700000200,
                },
                "parent": "a",
                "children": ["c"],
            },
        },
    }


@pytest.fixture
def chatgpt_bulk():
    return [chatgpt_conversation("conv-1"), chatgpt_conversation("conv-2", "Another")]


@pytest.fixture
def claude_legacy():
    return {
        "conversations": [
            {
                "id": "conv1",
                "name": "Test Conversation",
                "created_at": "2024-01-01T00:00:00Z",
                "messages": [
                    {"role": "human", "content": "Hello there", "timestamp": "2024-01-01T00:00:00Z"},
                    {"role": "assistant", "content": "Hi!", "timestamp": "2024-01-01T00:00:05Z"},
                ],
            }
        ],
        "export_info": {"created_at": "2024-01-02T00:00:00Z", "version": "1.1"},
    }


def claude_current_conversation(uuid="c-1", name="Block content"):
    return {
        "uuid": uuid,
        "name": name,
        "created_at": "2025-01-01T10:00:00Z",
        "updated_at": "2025-01-01T10:05:00Z",
        "account": {"uuid": "acct"},
        "chat_messages": [
            {
                "uuid": "m1",
                "text": "",
                "content": [
                    {"type": "text", "text": "Hello"},
                    {"type": "tool_use", "name": "search"},
                    {"type": "text", "text": "World"},
                ],
                "sender": "human",
                "created_at": "2025-01-01T10:00:00Z",
                "updated_at": "2025-01-01T10:00:00Z",
                "attachments": [],
                "files": [],
            },
            {
                "uuid": "m2",
                "text": "Plain answer",
                "content": [{"type": "text", "text": "ignored"}],
                "sender": "assistant",
                "created_at": "2025-01-01T10:01:00Z",
                "updated_at": "2025-01-01T10:01:00Z",
                "attachments": [{"file_name": "notes.txt", "extracted_content": "Meeting notes"}],
                "files": [],
            },
        ],
    }


@pytest.fixture
def claude_current():
    return [claude_current_conversation()]


def gemini_chat(title="Gemini chat", **extra):
    return {
        "title": title,
        "create_time": "2024-03-01T09:00:00Z",
        "messages": [
            {"author": "user", "text": "Question", "timestamp": "2024-03-01T09:00:00Z"},
            {"author": "model", "text": "Answer", "timestamp": "2024-03-01T09:00:10Z"},
        ],
        **extra,
    }


@pytest.fixture
def gemini_export():
    return {
        "chats": [gemini_chat()],
        "export_metadata": {"created_at": "2024-03-02T00:00:00Z", "version": "2024-01"},
    }


def perplexity_thread(thread_id="t-1", title="Search thread"):
    return {
        "title": title,
        "created_at": "2024-04-01T12:00:00Z",
        "thread_id": thread_id,
        "messages": [
            {"role": "user", "content": "What is HTTP/3?", "created_at": "2024-04-01T12:00:00Z"},
            {
                "role": "assistant",
                "content": "HTTP/3 runs over QUIC.",
                "created_at": "2024-04-01T12:00:04Z",
                "citations": ["https://example.com/quic", "https://example.com/h3"],
            },
        ],
    }


@pytest.fixture
def perplexity_export():
    return {"threads": [perplexity_thread()]}


@pytest.fixture
def write_export(tmp_path):
    def _write(data, name="export.json"):
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
