"""Conversion between catalog records and their stored text form.

Every enum variant has exactly one canonical text form, which is what the
storage layer persists. Reading anything else back is a hard failure: it
means the stored data is corrupt or was written by something else.
"""

from collections.abc import Callable
from datetime import date, datetime
from enum import Enum
from typing import Any, TypeVar

from ..models import CatalogRecord, Format, Media, Platform, VideoMode
from .errors import UnrecognizedValueError, ValidationError

E = TypeVar("E", bound=Enum)

# Kind names appear verbatim in "unrecognized <kind> <text>" messages
KIND_NAMES: dict[type[Enum], str] = {
    Format: "format",
    Media: "media",
    Platform: "platform",
    VideoMode: "video mode",
}

ENUM_COLUMNS: dict[str, type[Enum]] = {
    "media": Media,
    "format": Format,
    "platform": Platform,
    "video_mode": VideoMode,
}

TEXT_COLUMNS = ("title", "description", "developer", "genre")
INTEGER_COLUMNS = ("players", "rating_stars")
TIMESTAMP_COLUMNS = ("created_at", "updated_at")

COLUMNS = (
    "id",
    "title_id",
    "path",
    "media",
    "format",
    "platform",
    "size",
    "title",
    "description",
    "developer",
    "genre",
    "video_mode",
    "release",
    "players",
    "rating_stars",
    "created_at",
    "updated_at",
)


def to_text(variant: Enum) -> str:
    """Return the canonical text of an enum variant."""
    if type(variant) not in KIND_NAMES:
        raise TypeError(f"{type(variant).__name__} is not a catalog enum")
    return variant.value


def from_text(enum_type: type[E], text: str) -> E:
    """Return the variant of ``enum_type`` whose canonical text is ``text``.

    Matching is exact and case-sensitive.

    Raises:
        UnrecognizedValueError: If ``text`` is not a canonical form
    """
    kind = KIND_NAMES[enum_type]
    for variant in enum_type:
        if variant.value == text:
            return variant
    raise UnrecognizedValueError(kind, text)


def record_to_row(record: CatalogRecord) -> dict[str, Any]:
    """Map a record to the storage column layout.

    Enums become their canonical text and dates ISO-8601 text.
    """
    row: dict[str, Any] = {
        "id": record.id,
        "title_id": record.title_id,
        "path": record.path,
        "size": record.size,
        "release": record.release.isoformat() if record.release else None,
    }
    for column in ENUM_COLUMNS:
        variant = getattr(record, column)
        row[column] = to_text(variant) if variant is not None else None
    for column in TEXT_COLUMNS + INTEGER_COLUMNS:
        row[column] = getattr(record, column)
    for column in TIMESTAMP_COLUMNS:
        value = getattr(record, column)
        row[column] = value.isoformat() if value else None

    return {column: row[column] for column in COLUMNS}


def record_from_row(row: dict[str, Any]) -> CatalogRecord:
    """Build a record from a stored row.

    Raises:
        UnrecognizedValueError: If an enum column holds a non-canonical string
        ValidationError: If a required column is missing or a value is invalid
    """
    title_id = row.get("title_id")
    if not isinstance(title_id, str) or not title_id:
        raise ValidationError("title_id is required", field="title_id", value=title_id)

    path = row.get("path")
    if not isinstance(path, str) or not path:
        raise ValidationError("path is required", field="path", value=path)

    size = _integer(row, "size", required=True)
    if size < 0:
        raise ValidationError("size must not be negative", field="size", value=size)

    enums: dict[str, Enum | None] = {}
    for column, enum_type in ENUM_COLUMNS.items():
        text = row.get(column)
        enums[column] = from_text(enum_type, text) if text is not None else None

    texts: dict[str, str | None] = {}
    for column in TEXT_COLUMNS:
        value = row.get(column)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{column} must be text", field=column, value=value)
        texts[column] = value

    integers: dict[str, int | None] = {}
    for column in INTEGER_COLUMNS:
        value = _integer(row, column)
        if value is not None and value < 0:
            raise ValidationError(f"{column} must not be negative", field=column, value=value)
        integers[column] = value

    release = _parse_iso(row, "release", date.fromisoformat)
    timestamps = {column: _parse_iso(row, column, datetime.fromisoformat) for column in TIMESTAMP_COLUMNS}

    return CatalogRecord(
        id=_integer(row, "id"),
        title_id=title_id,
        path=path,
        size=size,
        release=release,
        **enums,
        **texts,
        **integers,
        **timestamps,
    )


def _integer(row: dict[str, Any], column: str, required: bool = False) -> int | None:
    value = row.get(column)
    if value is None and not required:
        return None
    # bool is an int subclass but never a valid column value
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{column} must be an integer", field=column, value=value)
    return value


def _parse_iso(row: dict[str, Any], column: str, parse: Callable[[str], Any]) -> Any:
    value = row.get(column)
    if value is None:
        return None
    try:
        return parse(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{column} is not an ISO-8601 date: {e}", field=column, value=value) from e
