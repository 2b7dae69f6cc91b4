from __future__ import annotations

from unittest.mock import MagicMock, patch

from autosearchpro.io.description_loader import load_description


def test_inline_text_wins(tmp_path) -> None:
    p = tmp_path / "jd.txt"
    p.write_text("from file", encoding="utf-8")
    loaded = load_description(text="  pasted text  ", path=str(p))
    assert loaded.text == "pasted text"
    assert loaded.source == "inline"


def test_text_file(fixtures_dir) -> None:
    loaded = load_description(path=str(fixtures_dir / "job_description.txt"))
    assert loaded.source == "text"
    assert "Kubernetes" in loaded.text


def test_nothing_given() -> None:
    loaded = load_description()
    assert loaded.text == ""
    assert loaded.source == "none"


def test_missing_file_is_none(tmp_path) -> None:
    loaded = load_description(path=str(tmp_path / "nope.txt"))
    assert loaded.source == "none"
    assert loaded.text == ""


def test_pdf_pages_are_joined(tmp_path) -> None:
    page1, page2, blank = MagicMock(), MagicMock(), MagicMock()
    page1.extract_text.return_value = "Senior   Go\nengineer"
    page2.extract_text.return_value = "Kafka and  Postgres"
    blank.extract_text.return_value = None

    with patch("autosearchpro.io.description_loader.PdfReader") as reader:
        reader.return_value.pages = [page1, blank, page2]
        loaded = load_description(path=str(tmp_path / "jd.pdf"))

    assert loaded.source == "pdf"
    assert loaded.text == "Senior Go engineer\nKafka and Postgres"


def test_unreadable_pdf_is_none(tmp_path) -> None:
    with patch("autosearchpro.io.description_loader.PdfReader", side_effect=OSError("bad pdf")):
        loaded = load_description(path=str(tmp_path / "broken.pdf"))
    assert loaded.source == "none"
    assert loaded.path.endswith("broken.pdf")
