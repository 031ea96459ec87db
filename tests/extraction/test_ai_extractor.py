import json
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest

from tocedit.exceptions import ExternalServiceError
from tocedit.extraction.ai_config import AiExtractionConfig
from tocedit.extraction.ai_extractor import AiTocExtractor, parse_toc_response


class FakeChat:
    def __init__(self, content: str = "", error: Exception = None) -> None:
        self.content = content
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def complete(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def fake_client(content: str = "", error: Exception = None) -> Any:
    return SimpleNamespace(chat=FakeChat(content, error))


def test_extract_parses_entries() -> None:
    content = json.dumps({"entries": [
        {"title": "Chapter 1", "page": 1, "level": 1},
        {"title": "1.1 Scope", "page": 2, "level": 2},
    ]})
    client = fake_client(content)
    extractor = AiTocExtractor(AiExtractionConfig(api_key="k", model="m"), client=client)

    drafts = extractor.extract("Chapter 1\n1.1 Scope")

    assert [(d.title, d.page, d.level) for d in drafts] == [("Chapter 1", 1, 1), ("1.1 Scope", 2, 2)]
    call = client.chat.calls[0]
    assert call["model"] == "m"
    assert call["messages"][0]["role"] == "system"


def test_extract_truncates_text() -> None:
    client = fake_client("[]")
    extractor = AiTocExtractor(AiExtractionConfig(api_key="k", max_chars=10), client=client)
    extractor.extract("x" * 100)
    user_message = client.chat.calls[0]["messages"][1]["content"]
    assert user_message.endswith("x" * 10)
    assert "x" * 11 not in user_message


def test_extract_service_failure_raises() -> None:
    extractor = AiTocExtractor(AiExtractionConfig(api_key="k"), client=fake_client(error=RuntimeError("503")))
    with pytest.raises(ExternalServiceError):
        extractor.extract("Chapter 1")


def test_extract_requires_text() -> None:
    extractor = AiTocExtractor(AiExtractionConfig(api_key="k"), client=fake_client("[]"))
    with pytest.raises(ValueError):
        extractor.extract("   ")


def test_missing_api_key_raises() -> None:
    with pytest.raises(ValueError):
        AiTocExtractor(AiExtractionConfig(api_key=""))


def test_parse_bare_list_in_markdown_block() -> None:
    content = 'Here you go:\n```json\n[{"title": "第一章", "page": 3, "level": 1}]\n```'
    drafts = parse_toc_response(content)
    assert [(d.title, d.page) for d in drafts] == [("第一章", 3)]


def test_parse_garbage_returns_empty() -> None:
    assert parse_toc_response("I could not find a table of contents.") == []
    assert parse_toc_response('{"entries": "none"}') == []


def test_parse_drops_invalid_items() -> None:
    content = json.dumps([
        {"title": "Good", "page": 1, "level": 1},
        {"title": "Bad level", "page": 1, "level": 5},
        {"title": "No page", "level": 1},
    ])
    assert [d.title for d in parse_toc_response(content)] == ["Good"]


def test_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("MISTRAL_API_KEY", "env-key")
    config = AiExtractionConfig.from_env(model="other")
    assert config.api_key == "env-key"
    assert config.model == "other"
    assert "api_key" not in config.to_dict()


def test_config_from_file(tmp_path) -> None:
    path = tmp_path / "ai.json"
    path.write_text(json.dumps({"api_key": "file-key", "max_chars": 100}))
    config = AiExtractionConfig.from_file(str(path))
    assert config.api_key == "file-key"
    assert config.max_chars == 100
