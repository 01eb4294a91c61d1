"""Tests for the platform adapters."""

import logging

import pytest

from chatsift.adapters import ChatGPTAdapter, ClaudeAdapter, GeminiAdapter, PerplexityAdapter
from chatsift.adapters.chatgpt import _flatten_parts
from chatsift.exceptions import ExportFormatError

from conftest import chatgpt_conversation, claude_current_conversation, gemini_chat, perplexity_thread


# ChatGPT

def test_chatgpt_validates_legacy_single_conversation(chatgpt_legacy):
    result = ChatGPTAdapter().validate(chatgpt_legacy)
    assert result.is_valid
    assert result.platform == "chatgpt"
    assert result.confidence > 0.8


def test_chatgpt_parses_legacy_single_conversation(chatgpt_legacy):
    result = ChatGPTAdapter().parse(chatgpt_legacy)
    assert len(result.conversations) == 1
    conv = result.conversations[0]
    assert conv.platform == "chatgpt"
    assert conv.title == "Test Conversation"
    assert [m.content for m in conv.messages] == ["Hello there"]
    assert conv.messages[0].timestamp == "2022-01-01T00:00:00.000Z"
    assert result.metadata.export_version == "2023-12"


def test_chatgpt_legacy_id_is_deterministic(chatgpt_legacy):
    first = ChatGPTAdapter().parse(chatgpt_legacy).conversations[0].id
    second = ChatGPTAdapter().parse(chatgpt_legacy).conversations[0].id
    assert first == second


def test_chatgpt_sorts_graph_nodes_chronologically(chatgpt_bulk):
    result = ChatGPTAdapter().parse(chatgpt_bulk)
    conv = result.conversations[0]
    assert [m.content for m in conv.messages] == ["First", "Second", "Third"]
    # system folds onto assistant
    assert [m.role for m in conv.messages] == ["user", "assistant", "assistant"]
    assert result.metadata.export_version == "2025-01"
    assert result.metadata.total_conversations == 2


def test_chatgpt_sorts_string_create_times():
    conv = chatgpt_conversation()
    conv["mapping"]["a"]["message"]["create_time"] = "2023-11-14T22:15:00Z"
    conv["mapping"]["c"]["message"]["create_time"] = "2023-11-14T22:18:20Z"
    messages = ChatGPTAdapter().parse([conv]).conversations[0].messages
    assert [m.content for m in messages] == ["First", "Second", "Third"]
    assert messages[2].timestamp == "2023-11-14T22:18:20.000Z"


def test_chatgpt_accepts_conversations_object():
    data = {"conversations": [chatgpt_conversation()]}
    result = ChatGPTAdapter().parse(data)
    assert result.conversations[0].id == "conv-1"
    assert result.metadata.export_version == "2024-06"


def test_chatgpt_drops_conversations_without_messages():
    empty = chatgpt_conversation("conv-empty")
    empty["mapping"] = {"root": {"id": "root", "message": None, "children": []}}
    result = ChatGPTAdapter().parse([chatgpt_conversation(), empty])
    assert [c.id for c in result.conversations] == ["conv-1"]
    assert result.metadata.skipped_conversations == 1


def test_chatgpt_malformed_entries_are_filtered():
    result = ChatGPTAdapter().parse([chatgpt_conversation(), chatgpt_conversation("c2"), {"title": "broken"}])
    assert [c.id for c in result.conversations] == ["conv-1", "c2"]


def test_chatgpt_flattens_multimodal_parts():
    parts = [
        "Look at this",
        {"content_type": "image_asset_pointer", "asset_pointer": "file-service://x"},
        {"content_type": "audio_transcription", "text": "spoken words"},
        {"content_type": "real_time_user_audio_video_asset_pointer"},
        {"name": "Plan", "content": {"blocks": []}},
        {"content_type": "tether_quote"},
    ]
    assert _flatten_parts(parts) == (
        "Look at this\n[Image]\n[Audio: spoken words]\n[Audio message]\n"
        "[Document: Plan]\n[tether_quote]"
    )


def test_chatgpt_rejects_unrelated_data():
    result = ChatGPTAdapter().validate({"invalid": "data"})
    assert not result.is_valid
    assert result.confidence == 0


def test_chatgpt_partial_shape_has_low_confidence():
    result = ChatGPTAdapter().validate({"title": "No mapping"})
    assert not result.is_valid
    assert result.platform == "chatgpt"
    assert result.confidence == pytest.approx(0.3)


def test_chatgpt_parse_raises_on_invalid_data():
    with pytest.raises(ExportFormatError):
        ChatGPTAdapter().parse({"invalid": "data"})


def test_chatgpt_confidence_decreases_with_malformed_entries():
    scores = []
    for broken in range(5):
        entries = [chatgpt_conversation(f"c{i}") for i in range(4 - broken)]
        entries += [{"title": f"broken {i}"} for i in range(broken)]
        scores.append(ChatGPTAdapter().validate(entries).confidence)
    assert scores[0] == 1.0
    assert all(later < earlier for earlier, later in zip(scores, scores[1:]))


# Claude

def test_claude_parses_legacy_format(claude_legacy):
    adapter = ClaudeAdapter()
    assert adapter.validate(claude_legacy).is_valid
    result = adapter.parse(claude_legacy)
    assert len(result.conversations) == 1
    conv = result.conversations[0]
    assert conv.platform == "claude"
    assert [m.role for m in conv.messages] == ["human", "assistant"]
    assert result.metadata.export_version == "1.1"


def test_claude_parses_current_format(claude_current):
    adapter = ClaudeAdapter()
    validation = adapter.validate(claude_current)
    assert validation.is_valid
    assert validation.confidence == 1.0

    result = adapter.parse(claude_current)
    conv = result.conversations[0]
    assert conv.id == "c-1"
    assert conv.messages[0].content == "Hello\nWorld"
    assert conv.messages[1].content == "Plain answer\n\n[Attachment: notes.txt]\nMeeting notes"
    assert result.metadata.export_version == "2025-01"


def test_claude_invalid_conversation_lowers_confidence(claude_legacy):
    claude_legacy["conversations"].append({"id": "bad", "name": "Bad"})
    result = ClaudeAdapter().validate(claude_legacy)
    assert result.confidence == 0.5
    assert not result.is_valid
    assert any("bad" in issue for issue in result.issues)


def test_claude_confidence_decreases_with_malformed_entries():
    scores = []
    for broken in range(4):
        entries = [claude_current_conversation(f"c{i}") for i in range(3 - broken)]
        entries += [{"uuid": f"x{i}", "name": "broken"} for i in range(broken)]
        scores.append(ClaudeAdapter().validate(entries).confidence)
    assert all(later < earlier for earlier, later in zip(scores, scores[1:]))


def test_claude_partial_export_still_parses_valid_entries():
    entries = [claude_current_conversation(f"c{i}") for i in range(3)] + [{"uuid": "x"}]
    result = ClaudeAdapter().parse(entries)
    assert [c.id for c in result.conversations] == ["c0", "c1", "c2"]
    assert result.metadata.skipped_conversations == 1


def test_claude_ignores_non_text_attachment_content():
    conv = claude_current_conversation()
    conv["chat_messages"][1]["attachments"] = [{"file_name": "data.bin", "extracted_content": 42}]
    result = ClaudeAdapter().parse([conv])
    assert result.conversations[0].messages[1].content == "Plain answer\n\n[Attachment: data.bin]"


def test_claude_parse_raises_on_missing_conversations():
    with pytest.raises(ExportFormatError):
        ClaudeAdapter().parse({"chats": []})


# Gemini and Perplexity

def test_gemini_parses_chats(gemini_export):
    result = GeminiAdapter().parse(gemini_export)
    conv = result.conversations[0]
    assert conv.platform == "gemini"
    assert [m.role for m in conv.messages] == ["user", "model"]
    assert result.metadata.export_version == "2024-01"


def test_gemini_generated_id_is_stable(gemini_export):
    first = GeminiAdapter().parse(gemini_export).conversations[0].id
    second = GeminiAdapter().parse(gemini_export).conversations[0].id
    assert first == second
    assert len(first) == 12


def test_gemini_accepts_bare_chat_array(gemini_export):
    wrapped = GeminiAdapter().parse(gemini_export)
    result = GeminiAdapter().parse(gemini_export["chats"])
    assert result.conversations == wrapped.conversations
    assert result.metadata.export_version == "2025-01"


def test_gemini_numeric_chat_id_is_stringified():
    result = GeminiAdapter().parse({"chats": [gemini_chat(chat_id=12345)]})
    assert result.conversations[0].id == "12345"


def test_gemini_rejects_missing_chats():
    result = GeminiAdapter().validate({"threads": []})
    assert not result.is_valid
    assert result.platform == "unknown"


def test_perplexity_appends_citations(perplexity_export):
    result = PerplexityAdapter().parse(perplexity_export)
    conv = result.conversations[0]
    assert conv.id == "t-1"
    assert conv.messages[1].content == (
        "HTTP/3 runs over QUIC.\n\nCitations:\n"
        "[1] https://example.com/quic\n[2] https://example.com/h3"
    )


def test_perplexity_accepts_bare_thread_array(perplexity_export):
    wrapped = PerplexityAdapter().parse(perplexity_export)
    result = PerplexityAdapter().parse(perplexity_export["threads"])
    assert result.conversations == wrapped.conversations
    assert result.metadata.export_version == "2025-01"


def test_perplexity_numeric_thread_id_is_stringified():
    result = PerplexityAdapter().parse([perplexity_thread(thread_id=7)])
    assert result.conversations[0].id == "7"


def test_metadata_date_range(claude_legacy):
    meta = ClaudeAdapter().parse(claude_legacy).metadata
    assert meta.date_range.earliest == "2024-01-01T00:00:00.000Z"
    assert meta.date_range.latest == "2024-01-01T00:00:05.000Z"


# Shared behaviour

@pytest.mark.parametrize("adapter_cls", [ChatGPTAdapter, ClaudeAdapter, GeminiAdapter, PerplexityAdapter])
def test_validate_never_raises(adapter_cls):
    adapter = adapter_cls()
    for data in (None, 42, "text", [], [None, 3], {"conversations": "nope"}):
        assert not adapter.validate(data).is_valid


@pytest.mark.parametrize(
    "adapter_cls, make_entry",
    [
        (GeminiAdapter, lambda i: gemini_chat(f"chat {i}")),
        (PerplexityAdapter, lambda i: perplexity_thread(f"t{i}")),
    ],
)
def test_array_confidence_decreases_with_malformed_entries(adapter_cls, make_entry):
    scores = []
    for broken in range(5):
        entries = [make_entry(i) for i in range(4 - broken)]
        entries += [{"title": f"broken {i}"} for i in range(broken)]
        scores.append(adapter_cls().validate(entries).confidence)
    assert scores[0] == 1.0
    assert all(later < earlier for earlier, later in zip(scores, scores[1:]))


def test_entry_failing_to_parse_is_skipped(monkeypatch, caplog):
    parse_chat = GeminiAdapter._parse_chat

    def failing_on_broken(self, chat):
        if chat["title"] == "broken":
            raise ValueError("cannot convert")
        return parse_chat(self, chat)

    monkeypatch.setattr(GeminiAdapter, "_parse_chat", failing_on_broken)
    chats = [gemini_chat("first"), gemini_chat("broken"), gemini_chat("third")]
    with caplog.at_level(logging.WARNING):
        result = GeminiAdapter().parse(chats)

    assert [c.title for c in result.conversations] == ["first", "third"]
    assert result.metadata.skipped_conversations == 1
    assert "Failed to parse conversation 'broken'" in caplog.text


def test_unrecognized_export_version_warns_but_parses(gemini_export, caplog):
    gemini_export["export_metadata"]["version"] = "9.9"
    with caplog.at_level(logging.WARNING):
        result = GeminiAdapter().parse(gemini_export)
    assert result.metadata.export_version == "9.9"
    assert "Unrecognized gemini export version '9.9'" in caplog.text


def test_known_export_version_does_not_warn(claude_legacy, caplog):
    with caplog.at_level(logging.WARNING):
        ClaudeAdapter().parse(claude_legacy)
    assert "Unrecognized" not in caplog.text
