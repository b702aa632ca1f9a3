from __future__ import annotations

import json
from pathlib import Path

import pytest

from maktaba.catalog.repository import ContentRepository
from maktaba.cli.catalog import main as catalog_main
from maktaba.cli.init_db import main as init_db_main
from maktaba.cli.search import main as search_main


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(tmp_path)
    for name in ("MAKTABA_DB_PATH", "MAKTABA_REPLICA_PATH", "MAKTABA_LIBRARY_ROOT", "MAKTABA_TEXT_ENCODING"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def _seed(db_path: Path) -> None:
    with ContentRepository(db_path) as repository:
        repository.connection.executemany(
            "INSERT INTO books (id, name, author) VALUES (?, ?, ?)",
            [(1, "Umdat al-Ahkam", "Al-Maqdisi"), (2, "Al-Arbain", "An-Nawawi")],
        )
        repository.connection.commit()


def test_init_db_then_catalog_items(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = workspace / "catalog.db"

    assert init_db_main(["--db-path", str(db_path)]) == 0
    created = json.loads(capsys.readouterr().out)
    _seed(db_path)

    exit_code = catalog_main(["--action", "items", "--category", "books", "--db-path", str(db_path)])
    payload = json.loads(capsys.readouterr().out)

    assert created["tables"] == ["books", "articles", "fatwa", "audios", "videos"]
    assert exit_code == 0
    assert [row["title"] for row in payload["data"]] == ["Al-Arbain", "Umdat al-Ahkam"]


def test_catalog_cli_reports_errors_with_nonzero_exit(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = workspace / "catalog.db"
    init_db_main(["--db-path", str(db_path)])
    capsys.readouterr()

    exit_code = catalog_main(["--action", "item", "--category", "books", "--id", "5", "--db-path", str(db_path)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["status"] == 404


def test_search_cli_uses_server_results(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = workspace / "catalog.db"
    init_db_main(["--db-path", str(db_path)])
    _seed(db_path)
    capsys.readouterr()

    exit_code = search_main(["--query", "nawawi", "--db-path", str(db_path)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["degraded"] is False
    assert [row["id"] for row in payload["data"]] == [2]


def test_search_cli_falls_back_when_database_is_unusable(workspace: Path, capsys: pytest.CaptureFixture[str]) -> None:
    replica_path = workspace / "replica.json"

    exit_code = search_main(
        [
            "--query",
            "anything",
            "--db-path",
            str(workspace / "no-schema.db"),
            "--replica-path",
            str(replica_path),
        ]
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["degraded"] is True
    assert payload["data"] == []
    assert "server_error" in payload
