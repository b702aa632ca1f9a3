"""CLI entrypoint for one catalog read action."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from maktaba.catalog.service import ACTIONS, build_service
from maktaba.config import CatalogSettings


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a catalog action and print the JSON envelope")
    parser.add_argument("--action", required=True, choices=ACTIONS, help="Catalog action to run")
    parser.add_argument("--category", default=None, help="Category for items/item actions")
    parser.add_argument("--page", type=int, default=1, help="1-based page number")
    parser.add_argument("--search", default=None, help="Substring filter")
    parser.add_argument("--id", dest="item_id", default=None, help="Item id for the item action")
    parser.add_argument("--scholar", default=None, help="Scholar directory name")
    parser.add_argument("--section", default=None, help="Scholar section (duruz, firak, pdf)")
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to MAKTABA_DB_PATH)")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
    settings = CatalogSettings.from_env()
    if args.db_path:
        settings = dataclasses.replace(settings, db_path=Path(args.db_path))

    params = {
        "category": args.category,
        "page": args.page,
        "search": args.search,
        "id": args.item_id,
        "scholar": args.scholar,
        "section": args.section,
    }
    service, repository = build_service(settings)
    try:
        payload = asyncio.run(service.handle(args.action, params))
    finally:
        repository.close()

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 1 if payload.get("error") else 0


if __name__ == "__main__":
    raise SystemExit(main())
