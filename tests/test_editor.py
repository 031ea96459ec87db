import json
from io import BytesIO
from pathlib import Path

import pytest
from PyPDF2 import PdfReader

from tocedit.config import SaveConfig
from tocedit.editor import (
    add_outline_to_pdf,
    default_output_path,
    detect_toc,
    extract_toc,
    open_pdf,
    save_pdf_with_outline,
)
from tocedit.exceptions import InvalidInputFileError
from tocedit.extraction.ai_config import AiExtractionConfig
from tocedit.toc.models import TableOfContents


def test_open_pdf_from_bytes_and_path(tmp_path: Path, pdf_factory) -> None:
    data = pdf_factory(3)
    path = tmp_path / "doc.pdf"
    path.write_bytes(data)
    assert open_pdf(data).page_count() == 3
    assert open_pdf(path).page_count() == 3


def test_open_pdf_invalid() -> None:
    with pytest.raises(InvalidInputFileError):
        open_pdf(b"nope")


def test_detect_toc_assigns_ids() -> None:
    toc = detect_toc("第一章 总论\n1.1 背景\n", page_offset=1)
    assert [(e.title, e.level) for e in toc.entries] == [("第一章 总论", 1), ("1.1 背景", 2)]
    assert toc.page_offset == 1
    assert len({e.id for e in toc.entries}) == 2


def test_extract_toc_requires_api_key() -> None:
    with pytest.raises(ValueError):
        extract_toc("Chapter 1", AiExtractionConfig(api_key=""))


def test_add_outline_to_pdf(pdf_factory) -> None:
    toc = TableOfContents()
    toc.append("Only", 2, 1)
    result = add_outline_to_pdf(pdf_factory(3), toc, title="T", config=SaveConfig(producer="p"))
    assert result.had_outline
    reader = PdfReader(BytesIO(result.data))
    assert reader.get_destination_page_number(reader.outline[0]) == 1
    assert reader.metadata.producer == "p"


def test_save_pdf_with_outline_offset_override(tmp_path: Path, pdf_factory) -> None:
    pdf_path = tmp_path / "report.pdf"
    pdf_path.write_bytes(pdf_factory(5))
    toc_path = tmp_path / "toc.json"
    toc_path.write_text(json.dumps({
        "entries": [{"id": "a", "title": "Intro", "page": 1, "level": 1}],
        "page_offset": 0,
    }), encoding="utf-8")

    result = save_pdf_with_outline(pdf_path, toc_path, page_offset=4)

    output = default_output_path(pdf_path)
    assert output.name == "report_with_toc.pdf"
    reader = PdfReader(str(output))
    assert result.had_outline
    assert reader.get_destination_page_number(reader.outline[0]) == 4


def test_save_config_from_env(tmp_path: Path, monkeypatch) -> None:
    path = tmp_path / "save.json"
    path.write_text(json.dumps({"title": "Configured", "producer": "prod"}))
    monkeypatch.setenv("TOCEDIT_SAVE_CONFIG", str(path))
    config = SaveConfig.from_env()
    assert config.title == "Configured"
    assert config.to_dict() == {"producer": "prod", "creator": config.creator, "title": "Configured"}

    monkeypatch.delenv("TOCEDIT_SAVE_CONFIG")
    assert SaveConfig.from_env() == SaveConfig()
