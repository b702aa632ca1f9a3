from __future__ import annotations

from pathlib import Path

import pytest

from maktaba.errors import NotFoundError, ValidationError
from maktaba.library.scholars import ScholarLibrary


def _build_library(root: Path) -> ScholarLibrary:
    scholar = root / "Ibn Baz"
    (scholar / "duruz").mkdir(parents=True)
    (scholar / "firak").mkdir()
    (scholar / "pdf").mkdir()
    (scholar / "duruz" / "b-lesson.ogg").write_bytes(b"ogg-data")
    (scholar / "duruz" / "a-lesson.mp3").write_bytes(b"mp3")
    (scholar / "duruz" / "notes.txt").write_text("not media", encoding="utf-8")
    (scholar / "firak" / "sects.MP3").write_bytes(b"mp3")
    (scholar / "pdf" / "fatawa.pdf").write_bytes(b"%PDF")
    (scholar / "ibnbaz.jpg").write_bytes(b"jpg")
    (root / "Al-Albani").mkdir()
    (root / "README.txt").write_text("ignored", encoding="utf-8")
    return ScholarLibrary(root)


def test_list_scholars_returns_directories_sorted(tmp_path: Path) -> None:
    library = _build_library(tmp_path / "sabios")

    assert [scholar.name for scholar in library.list_scholars()] == ["Al-Albani", "Ibn Baz"]


def test_scholar_info_counts_sections_and_finds_portrait(tmp_path: Path) -> None:
    library = _build_library(tmp_path / "sabios")

    info = library.scholar_info("Ibn Baz").to_dict()

    assert info["name"] == "Ibn Baz"
    assert info["image"] == "assets/sabios/Ibn Baz/ibnbaz.jpg"
    assert info["stats"] == {"total_audio": 3, "total_pdf": 1, "categories": {"duruz": 2, "firak": 1, "pdf": 1}}


def test_scholar_without_media_or_portrait(tmp_path: Path) -> None:
    library = _build_library(tmp_path / "sabios")

    info = library.scholar_info("Al-Albani")

    assert info.image is None
    assert info.stats.total_audio == 0
    assert info.stats.total_pdf == 0


def test_scholar_content_lists_media_files_sorted(tmp_path: Path) -> None:
    library = ScholarLibrary(tmp_path / "sabios", url_prefix="media/sabios/")
    _build_library(tmp_path / "sabios")

    listing = library.scholar_content("Ibn Baz", "duruz").to_dict()

    assert listing["sabio"] == "Ibn Baz"
    assert listing["category"] == "duruz"
    assert listing["total"] == 2
    assert listing["files"][0] == {
        "name": "a-lesson",
        "filename": "a-lesson.mp3",
        "path": "media/sabios/Ibn Baz/duruz/a-lesson.mp3",
        "size": 3,
        "extension": "mp3",
        "type": "audio",
    }
    assert listing["files"][1]["filename"] == "b-lesson.ogg"


def test_pdf_section_lists_documents(tmp_path: Path) -> None:
    library = _build_library(tmp_path / "sabios")

    listing = library.scholar_content("Ibn Baz", "pdf")

    assert [media.filename for media in listing.files] == ["fatawa.pdf"]
    assert listing.files[0].kind == "document"


@pytest.mark.parametrize("scholar", ["..", "../etc", "a/b", "", None])
def test_unsafe_scholar_names_are_rejected(tmp_path: Path, scholar) -> None:
    library = _build_library(tmp_path / "sabios")

    with pytest.raises(ValidationError):
        library.scholar_info(scholar)


def test_missing_entries_are_not_found(tmp_path: Path) -> None:
    library = _build_library(tmp_path / "sabios")

    with pytest.raises(NotFoundError):
        library.scholar_info("Unknown")
    with pytest.raises(NotFoundError):
        library.scholar_content("Al-Albani", "duruz")
    with pytest.raises(NotFoundError):
        ScholarLibrary(tmp_path / "missing").list_scholars()
