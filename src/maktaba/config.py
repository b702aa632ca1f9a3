"""Runtime configuration for catalog, replica and library modules."""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Mapping


DEFAULT_DB_PATH = ".maktaba.db"
DEFAULT_CATEGORY_TIMEOUT_SECONDS = 10.0
DEFAULT_FEDERATED_POOL_SIZE = 10
DEFAULT_REPLICA_PATH = ".maktaba-replica.json"
DEFAULT_REPLICA_MAX_AGE_SECONDS = 30 * 60
DEFAULT_REPLICA_SAMPLE_SIZE = 50
DEFAULT_TEXT_ENCODING = "utf-8"
DEFAULT_LIBRARY_ROOT = "sabios"
DEFAULT_LIBRARY_URL_PREFIX = "assets/sabios"


def _parse_positive_int(*, name: str, raw_value: str, minimum: int = 1) -> int:
    try:
        value = int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _parse_positive_float(*, name: str, raw_value: str, minimum: float = 0.001) -> float:
    try:
        value = float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number") from exc
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}")
    return value


def _validate_encoding(raw_value: str) -> str:
    if raw_value == "auto":
        return raw_value
    try:
        "".encode(raw_value)
    except LookupError as exc:
        raise ValueError(f"MAKTABA_TEXT_ENCODING is not a known codec: {raw_value}") from exc
    return raw_value


@dataclass(frozen=True, slots=True)
class CatalogSettings:
    """Validated catalog runtime settings."""

    db_path: Path
    replica_path: Path
    library_root: Path
    category_timeout_seconds: float = DEFAULT_CATEGORY_TIMEOUT_SECONDS
    federated_pool_size: int = DEFAULT_FEDERATED_POOL_SIZE
    replica_max_age_seconds: int = DEFAULT_REPLICA_MAX_AGE_SECONDS
    replica_sample_size: int = DEFAULT_REPLICA_SAMPLE_SIZE
    text_encoding: str = DEFAULT_TEXT_ENCODING
    library_url_prefix: str = DEFAULT_LIBRARY_URL_PREFIX

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CatalogSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        db_path_raw = source.get("MAKTABA_DB_PATH", DEFAULT_DB_PATH).strip()
        replica_path_raw = source.get("MAKTABA_REPLICA_PATH", DEFAULT_REPLICA_PATH).strip()
        library_root_raw = source.get("MAKTABA_LIBRARY_ROOT", DEFAULT_LIBRARY_ROOT).strip()
        timeout_raw = source.get("MAKTABA_CATEGORY_TIMEOUT_SECONDS", str(DEFAULT_CATEGORY_TIMEOUT_SECONDS)).strip()
        pool_size_raw = source.get("MAKTABA_FEDERATED_POOL_SIZE", str(DEFAULT_FEDERATED_POOL_SIZE)).strip()
        max_age_raw = source.get("MAKTABA_REPLICA_MAX_AGE_SECONDS", str(DEFAULT_REPLICA_MAX_AGE_SECONDS)).strip()
        sample_size_raw = source.get("MAKTABA_REPLICA_SAMPLE_SIZE", str(DEFAULT_REPLICA_SAMPLE_SIZE)).strip()
        encoding_raw = source.get("MAKTABA_TEXT_ENCODING", DEFAULT_TEXT_ENCODING).strip().lower()
        url_prefix_raw = source.get("MAKTABA_LIBRARY_URL_PREFIX", DEFAULT_LIBRARY_URL_PREFIX).strip()

        required = {
            "MAKTABA_DB_PATH": db_path_raw,
            "MAKTABA_REPLICA_PATH": replica_path_raw,
            "MAKTABA_LIBRARY_ROOT": library_root_raw,
            "MAKTABA_CATEGORY_TIMEOUT_SECONDS": timeout_raw,
            "MAKTABA_FEDERATED_POOL_SIZE": pool_size_raw,
            "MAKTABA_REPLICA_MAX_AGE_SECONDS": max_age_raw,
            "MAKTABA_REPLICA_SAMPLE_SIZE": sample_size_raw,
            "MAKTABA_TEXT_ENCODING": encoding_raw,
            "MAKTABA_LIBRARY_URL_PREFIX": url_prefix_raw,
        }
        for name, value in required.items():
            if not value:
                raise ValueError(f"{name} cannot be empty")

        return cls(
            db_path=Path(db_path_raw),
            replica_path=Path(replica_path_raw),
            library_root=Path(library_root_raw),
            category_timeout_seconds=_parse_positive_float(
                name="MAKTABA_CATEGORY_TIMEOUT_SECONDS",
                raw_value=timeout_raw,
                minimum=0.1,
            ),
            federated_pool_size=_parse_positive_int(
                name="MAKTABA_FEDERATED_POOL_SIZE",
                raw_value=pool_size_raw,
            ),
            replica_max_age_seconds=_parse_positive_int(
                name="MAKTABA_REPLICA_MAX_AGE_SECONDS",
                raw_value=max_age_raw,
            ),
            replica_sample_size=_parse_positive_int(
                name="MAKTABA_REPLICA_SAMPLE_SIZE",
                raw_value=sample_size_raw,
            ),
            text_encoding=_validate_encoding(encoding_raw),
            library_url_prefix=url_prefix_raw.rstrip("/"),
        )
