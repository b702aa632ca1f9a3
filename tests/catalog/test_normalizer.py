from __future__ import annotations

import json

import pytest

from maktaba.catalog.models import Attachment
from maktaba.catalog.normalize import Normalizer
from maktaba.catalog.query import QueryExecutor
from maktaba.errors import InvalidCategoryError


def _fetch_all(repository, category: str):
    return QueryExecutor(repository).fetch(category, None, 0, 100)


def test_book_rows_map_name_topics_and_author(repository, insert_rows, fixed_clock) -> None:
    insert_rows(
        "books",
        [{"id": 1, "name": "كتاب التوحيد", "author": "Author", "topics": "Aqida", "pages": 120, "format": "pdf"}],
    )
    normalizer = Normalizer(clock=fixed_clock)

    item = normalizer.normalize(_fetch_all(repository, "books")[0], "books")

    assert item.id == 1
    assert item.type == "books"
    assert item.title == "كتاب التوحيد"
    assert item.description == "Aqida"
    assert item.prepared_by == "Author"
    assert item.add_date == "2024-05-01 12:00:00"
    assert item.extra["pages"] == 120
    assert item.extra["format"] == "pdf"
    assert item.extra["publisher"] is None
    assert "id" not in item.extra


def test_book_with_missing_name_gets_empty_title(fixed_clock) -> None:
    item = Normalizer(clock=fixed_clock).normalize({"id": 2, "name": None, "author": None}, "books")

    assert item.title == ""
    assert item.description == ""
    assert item.prepared_by == ""


def test_fatwa_uses_answer_as_description_and_created_at_as_date(repository, insert_rows, fixed_clock) -> None:
    insert_rows(
        "fatwa",
        [
            {
                "id": 3,
                "title": "Question title",
                "question": "What is the ruling?",
                "answer": "A" * 200,
                "created_at": "2023-01-02 08:30:00",
            }
        ],
    )

    item = Normalizer(clock=fixed_clock).normalize(_fetch_all(repository, "fatwa")[0], "fatwa")

    assert item.title == "Question title"
    assert item.description == "A" * 200
    assert item.description_short == "A" * 150 + "..."
    assert item.add_date == "2023-01-02 08:30:00"
    assert item.prepared_by is None
    assert item.extra["question"] == "What is the ruling?"
    assert "title" not in item.extra


def test_generic_rows_parse_attachments_and_keep_extra_columns(repository, insert_rows, fixed_clock) -> None:
    attachments = [
        {"url": "https://example.org/a.pdf", "extension": "pdf", "size": "1 MB", "title": "Part 1", "type": "file"},
        "not-an-object",
    ]
    insert_rows(
        "articles",
        [
            {
                "id": 7,
                "title": "Purification",
                "description": "Short text",
                "localized_name": "الطهارة",
                "prepared_by": "Editor",
                "add_date": "2024-01-01",
                "attachments": json.dumps(attachments),
                "extracted_at": "2024-02-01 00:00:00",
            }
        ],
    )

    item = Normalizer(clock=fixed_clock).normalize(_fetch_all(repository, "articles")[0], "articles")

    assert item.add_date == "2024-01-01"
    assert item.description_short == "Short text"
    assert item.attachments == (
        Attachment(url="https://example.org/a.pdf", extension="pdf", size="1 MB", title="Part 1", kind="file"),
    )
    assert item.extra["localized_name"] == "الطهارة"
    assert item.extra["extracted_at"] == "2024-02-01 00:00:00"
    assert "attachments" not in item.extra

    payload = item.to_dict()
    assert payload["localized_name"] == "الطهارة"
    assert payload["attachments"][0]["type"] == "file"


def test_corrupt_attachments_degrade_to_empty(fixed_clock) -> None:
    row = {"id": 8, "title": "Audio", "attachments": "{not json", "pub_date": "2022-10-10"}

    item = Normalizer(clock=fixed_clock).normalize(row, "audios")

    assert item.attachments == ()
    assert item.add_date == "2022-10-10"


def test_corrupt_bytes_are_sanitized_instead_of_raising(fixed_clock) -> None:
    row = {"id": 5, "title": b"bad\xff\xfe title", "description": None}

    item = Normalizer(clock=fixed_clock).normalize(row, "videos")

    assert item.title == "bad title"
    assert item.description is None
    assert item.description_short is None
    assert item.add_date == "2024-05-01 12:00:00"


def test_normalization_is_idempotent_with_a_fixed_clock(fixed_clock) -> None:
    normalizer = Normalizer(clock=fixed_clock)
    row = {"id": 9, "title": "Same", "description": "x" * 300}

    assert normalizer.normalize(row, "videos") == normalizer.normalize(row, "videos")


def test_unknown_category_is_rejected(fixed_clock) -> None:
    with pytest.raises(InvalidCategoryError):
        Normalizer(clock=fixed_clock).normalize({"id": 1}, "podcasts")
