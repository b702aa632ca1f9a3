from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from datetime import datetime
from pathlib import Path
from typing import Any

import pytest

from maktaba.catalog.repository import ContentRepository


FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "catalog.db"


@pytest.fixture
def repository(db_path: Path) -> Iterator[ContentRepository]:
    repo = ContentRepository(db_path, create_schema=True)
    yield repo
    repo.close()


@pytest.fixture
def insert_rows(repository: ContentRepository) -> Callable[[str, list[Mapping[str, Any]]], None]:
    def _insert(table: str, rows: list[Mapping[str, Any]]) -> None:
        for row in rows:
            columns = ", ".join(row)
            placeholders = ", ".join("?" for _ in row)
            repository.connection.execute(
                f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
                tuple(row.values()),
            )
        repository.connection.commit()

    return _insert


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    return lambda: FIXED_NOW
