"""Checkout shim so `python -m maktaba.cli.*` resolves the src-layout package."""

from __future__ import annotations

from pathlib import Path

_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _ROOT / "src" / "maktaba"

if _SRC_DIR.is_dir():
    __path__.append(str(_SRC_DIR))

__version__ = "0.1.0"
