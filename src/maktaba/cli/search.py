"""CLI entrypoint for federated search with the local replica fallback."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

from maktaba.catalog.service import build_service
from maktaba.client.fallback import CatalogClient
from maktaba.client.replica import ClientSearchReplica
from maktaba.config import CatalogSettings


async def _run(client: CatalogClient, query: str, page: int, *, refresh_replica: bool) -> dict[str, object]:
    if refresh_replica:
        await client.warm_replica()
    response = await client.search(query, page)
    return response.to_dict()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Search every category, falling back to the local replica")
    parser.add_argument("--query", required=True, help="Substring to search for")
    parser.add_argument("--page", type=int, default=1, help="1-based page number")
    parser.add_argument(
        "--refresh-replica",
        action="store_true",
        help="Refresh the local replica before searching when it is stale",
    )
    parser.add_argument("--db-path", default=None, help="SQLite database path (defaults to MAKTABA_DB_PATH)")
    parser.add_argument("--replica-path", default=None, help="Replica file (defaults to MAKTABA_REPLICA_PATH)")
    args = parser.parse_args(argv)

    load_dotenv()
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
    settings = CatalogSettings.from_env()
    if args.db_path:
        settings = dataclasses.replace(settings, db_path=Path(args.db_path))
    if args.replica_path:
        settings = dataclasses.replace(settings, replica_path=Path(args.replica_path))

    service, repository = build_service(settings)
    replica = ClientSearchReplica(
        settings.replica_path,
        max_age_seconds=settings.replica_max_age_seconds,
        sample_size=settings.replica_sample_size,
    )
    client = CatalogClient(service.aggregator, replica)
    try:
        payload = asyncio.run(_run(client, args.query, args.page, refresh_replica=args.refresh_replica))
    finally:
        repository.close()

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
