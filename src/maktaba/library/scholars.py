"""Per-scholar media library: lessons, lectures and PDFs kept on disk."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path

from maktaba.errors import NotFoundError, ValidationError


AUDIO_SECTIONS = ("duruz", "firak")
DOCUMENT_SECTION = "pdf"
SECTIONS = (*AUDIO_SECTIONS, DOCUMENT_SECTION)
AUDIO_EXTENSIONS = frozenset({"mp3", "wav", "ogg", "mp4", "mpeg"})
DOCUMENT_EXTENSIONS = frozenset({"pdf"})
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp")


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Scholar:
    name: str
    display_name: str
    path: str

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "display_name": self.display_name, "path": self.path}


@dataclass(frozen=True, slots=True)
class ScholarStats:
    total_audio: int = 0
    total_pdf: int = 0
    sections: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {"total_audio": self.total_audio, "total_pdf": self.total_pdf, "categories": dict(self.sections)}


@dataclass(frozen=True, slots=True)
class ScholarInfo:
    name: str
    image: str | None
    stats: ScholarStats

    def to_dict(self) -> dict[str, object]:
        return {"name": self.name, "image": self.image, "stats": self.stats.to_dict()}


@dataclass(frozen=True, slots=True)
class MediaFile:
    name: str
    filename: str
    path: str
    size: int
    extension: str
    kind: str

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "filename": self.filename,
            "path": self.path,
            "size": self.size,
            "extension": self.extension,
            "type": self.kind,
        }


@dataclass(frozen=True, slots=True)
class SectionListing:
    scholar: str
    section: str
    files: tuple[MediaFile, ...]

    @property
    def total(self) -> int:
        return len(self.files)

    def to_dict(self) -> dict[str, object]:
        return {
            "sabio": self.scholar,
            "category": self.section,
            "files": [media.to_dict() for media in self.files],
            "total": self.total,
        }


def _allowed_extensions(section: str) -> frozenset[str]:
    return DOCUMENT_EXTENSIONS if section == DOCUMENT_SECTION else AUDIO_EXTENSIONS


def _safe_segment(value: str | None, *, label: str) -> str:
    segment = (value or "").strip()
    if not segment:
        raise ValidationError(f"{label} is required")
    if segment in {".", ".."} or "/" in segment or "\\" in segment or "\x00" in segment:
        raise ValidationError(f"Invalid {label}: {segment!r}")
    return segment


class ScholarLibrary:
    """Read-only listing of ``<root>/<scholar>/<section>/<file>`` trees."""

    def __init__(self, root: str | Path, *, url_prefix: str = "assets/sabios") -> None:
        self._root = Path(root)
        self._url_prefix = url_prefix.rstrip("/")

    def _url(self, *parts: str) -> str:
        return "/".join((self._url_prefix, *parts))

    def _scholar_dir(self, name: str | None) -> tuple[str, Path]:
        scholar = _safe_segment(name, label="scholar")
        directory = self._root / scholar
        if not directory.is_dir():
            raise NotFoundError(f"Scholar not found: {scholar}")
        return scholar, directory

    def list_scholars(self) -> list[Scholar]:
        if not self._root.is_dir():
            raise NotFoundError(f"Scholar library not found: {self._root}")
        return [
            Scholar(name=entry.name, display_name=entry.name, path=str(entry))
            for entry in sorted(self._root.iterdir(), key=lambda path: path.name)
            if entry.is_dir()
        ]

    def scholar_info(self, name: str | None) -> ScholarInfo:
        scholar, directory = self._scholar_dir(name)
        sections: dict[str, int] = {}
        total_audio = 0
        total_pdf = 0
        for section in SECTIONS:
            count = len(self._media_paths(directory / section, section))
            sections[section] = count
            if section == DOCUMENT_SECTION:
                total_pdf += count
            else:
                total_audio += count
        return ScholarInfo(
            name=scholar,
            image=self._find_image(scholar, directory),
            stats=ScholarStats(total_audio=total_audio, total_pdf=total_pdf, sections=sections),
        )

    def scholar_content(self, name: str | None, section: str | None) -> SectionListing:
        scholar, directory = self._scholar_dir(name)
        section_name = _safe_segment(section, label="section")
        section_dir = directory / section_name
        if not section_dir.is_dir():
            raise NotFoundError(f"Section '{section_name}' not found for scholar '{scholar}'")

        kind = "document" if section_name == DOCUMENT_SECTION else "audio"
        files = [
            MediaFile(
                name=path.stem,
                filename=path.name,
                path=self._url(scholar, section_name, path.name),
                size=path.stat().st_size,
                extension=path.suffix.lower().lstrip("."),
                kind=kind,
            )
            for path in self._media_paths(section_dir, section_name)
        ]
        files.sort(key=lambda media: media.name)
        return SectionListing(scholar=scholar, section=section_name, files=tuple(files))

    def _media_paths(self, section_dir: Path, section: str) -> list[Path]:
        if not section_dir.is_dir():
            return []
        allowed = _allowed_extensions(section)
        return [
            path
            for path in section_dir.iterdir()
            if path.is_file() and path.suffix.lower().lstrip(".") in allowed
        ]

    def _find_image(self, scholar: str, directory: Path) -> str | None:
        preferred_stem = scholar.replace(" ", "").lower()
        for extension in IMAGE_EXTENSIONS:
            preferred = directory / f"{preferred_stem}.{extension}"
            if preferred.is_file():
                return self._url(scholar, preferred.name)
            candidates = sorted(directory.glob(f"*.{extension}"))
            if candidates:
                return self._url(scholar, candidates[0].name)
        logger.debug("No portrait found for scholar %s", scholar)
        return None
