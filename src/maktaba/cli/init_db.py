"""CLI entrypoint that creates the category tables."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from maktaba.catalog.registry import DEFAULT_REGISTRY
from maktaba.catalog.repository import ContentRepository
from maktaba.config import CatalogSettings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create the category tables in the catalog database")
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to MAKTABA_DB_PATH)")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
    settings = CatalogSettings.from_env()
    if args.db_path:
        settings = dataclasses.replace(settings, db_path=Path(args.db_path))

    with ContentRepository(settings.db_path, create_schema=True):
        pass

    payload = {"db_path": str(settings.db_path), "tables": list(DEFAULT_REGISTRY.names())}
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
