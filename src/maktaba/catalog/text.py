"""Best-effort text sanitation for upstream content of uncontrolled quality."""

from __future__ import annotations

import re

from charset_normalizer import from_bytes


AUTO_ENCODING = "auto"
ELLIPSIS = "..."

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_NON_PRINTABLE_ASCII_RE = re.compile(rb"[^\x20-\x7e\t\n\r]")


def strip_control_chars(text: str) -> str:
    """Drop control characters, keeping tab, newline and carriage return."""

    return _CONTROL_RE.sub("", text)


def strip_to_printable_ascii(raw: bytes) -> str:
    return _NON_PRINTABLE_ASCII_RE.sub(b"", raw).decode("ascii")


def _detect_and_decode(raw: bytes) -> str | None:
    best = from_bytes(raw).best()
    if best is None or not best.encoding:
        return None
    try:
        return raw.decode(best.encoding)
    except (LookupError, UnicodeDecodeError):
        return None


def decode_bytes(raw: bytes, encoding: str = "utf-8") -> str:
    """Decode with the declared encoding, degrading to printable ASCII on failure."""

    if encoding == AUTO_ENCODING:
        detected = _detect_and_decode(raw)
        if detected is not None:
            return detected
        return strip_to_printable_ascii(raw)

    try:
        return raw.decode(encoding)
    except (LookupError, UnicodeDecodeError):
        return strip_to_printable_ascii(raw)


def sanitize_text(value: object, *, encoding: str = "utf-8") -> str | None:
    """Return a control-character-free string for any text-like value.

    ``None`` stays ``None``. Bytes are decoded (see :func:`decode_bytes`).
    Strings carrying lone surrogates are re-encoded with replacement so the
    result is always a valid sequence. Never raises on bad input.
    """

    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        text = decode_bytes(bytes(value), encoding)
    elif isinstance(value, str):
        text = value.encode("utf-8", errors="replace").decode("utf-8")
    else:
        text = str(value)
    return strip_control_chars(text)


def sanitize_value(value: object, *, encoding: str = "utf-8") -> object:
    """Sanitize text-like values and pass other scalars through untouched."""

    if isinstance(value, (str, bytes, bytearray, memoryview)):
        return sanitize_text(value, encoding=encoding)
    return value


def truncate_description(text: str | None, *, limit: int) -> str | None:
    if text is None:
        return None
    if len(text) <= limit:
        return text
    return text[:limit].rstrip() + ELLIPSIS


def casefold_text(value: object) -> str | None:
    """Unicode case folding for search; registered as the SQL ``casefold`` function."""

    if value is None:
        return None
    if isinstance(value, (bytes, bytearray, memoryview)):
        return decode_bytes(bytes(value)).casefold()
    return str(value).casefold()
