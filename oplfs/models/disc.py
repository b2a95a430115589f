"""Disc catalog data models."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum


class Media(Enum):
    """The physical media of the disc."""
    CD = "CD"  # A PS2 CD or a PS1 disc
    DVD = "DVD"  # A PS2 single or dual layer DVD


class Format(Enum):
    """The image format of the disc."""
    ISO = "ISO"


class Platform(Enum):
    """The platform the disc was made for."""
    PS2 = "PS2"


class VideoMode(Enum):
    """The video mode(s) a disc supports."""
    MULTI = "multi"
    NTSC = "NTSC"
    PAL = "PAL"


@dataclass(frozen=True)
class CatalogRecord:
    """A disc in the catalog.

    ``id``, ``created_at`` and ``updated_at`` are assigned by the storage
    layer; records built by the crawler leave them unset.
    """
    title_id: str
    path: str
    size: int
    id: int | None = None
    media: Media | None = None
    format: Format | None = None
    platform: Platform | None = None
    video_mode: VideoMode | None = None
    title: str | None = None
    description: str | None = None
    developer: str | None = None
    genre: str | None = None
    release: date | None = None
    players: int | None = None
    rating_stars: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
