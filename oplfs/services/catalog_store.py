"""JSON-backed disc catalog."""

import json
from dataclasses import fields, replace
from datetime import datetime, timezone
from pathlib import Path

import structlog

from ..models import CatalogRecord
from .catalog_codec import record_from_row, record_to_row
from .errors import ValidationError

log = structlog.stdlib.get_logger()

CATALOG_VERSION = 1
STORAGE_FIELDS = ("id", "created_at", "updated_at")


class CatalogStore:
    """Persists catalog records as a JSON file, one row per disc keyed by path.

    The store owns ``id`` and timestamp assignment. Rows pass through the
    catalog codec in both directions, so a stored enum that is not canonical
    text fails the load instead of being coerced.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._records: dict[str, CatalogRecord] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._records)

    def records(self) -> list[CatalogRecord]:
        """All records, ordered by id."""
        return sorted(self._records.values(), key=lambda r: r.id or 0)

    def get(self, path: str) -> CatalogRecord | None:
        return self._records.get(path)

    def load(self) -> None:
        """Load the catalog file, or start empty if it does not exist.

        Raises:
            UnrecognizedValueError: If a row holds a non-canonical enum string
            ValidationError: If the file or a row is malformed
        """
        self._records = {}
        self._next_id = 1

        if not self.path.exists():
            log.info("Catalog file not found, starting empty", path=str(self.path))
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            log.error("Invalid JSON in catalog", path=str(self.path), error=str(e))
            raise ValidationError(f"Invalid JSON in catalog {self.path}: {e}", field="catalog") from e

        if not isinstance(data, dict) or not isinstance(data.get("discs"), list):
            raise ValidationError("Catalog must be an object with a discs list", field="catalog")

        for row in data["discs"]:
            if not isinstance(row, dict):
                raise ValidationError("Catalog rows must be objects", field="discs", value=row)
            record = record_from_row(row)
            self._records[record.path] = record
            if record.id is not None:
                self._next_id = max(self._next_id, record.id + 1)

        log.info("Catalog loaded", path=str(self.path), discs=len(self._records))

    def upsert(self, record: CatalogRecord, now: datetime | None = None) -> CatalogRecord:
        """Insert a record or update the one with the same path.

        Returns:
            The stored record with id and timestamps assigned
        """
        now = now or datetime.now(timezone.utc)
        existing = self._records.get(record.path)

        if existing is None:
            stored = replace(record, id=self._next_id, created_at=now, updated_at=now)
            self._next_id += 1
            log.debug("Catalog record added", path=record.path, title_id=record.title_id, id=stored.id)
        else:
            # Fields the new record leaves unset keep their stored values
            changes = {
                f.name: getattr(record, f.name)
                for f in fields(record)
                if f.name not in STORAGE_FIELDS and getattr(record, f.name) is not None
            }
            stored = replace(existing, **changes, updated_at=now)
            log.debug("Catalog record updated", path=record.path, title_id=record.title_id, id=stored.id)

        self._records[record.path] = stored
        return stored

    def save(self) -> None:
        """Write the catalog atomically (temporary file, then replace)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        data = {
            "version": CATALOG_VERSION,
            "discs": [record_to_row(record) for record in self.records()],
        }

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.path)
        except OSError as e:
            log.error("Failed to save catalog", path=str(self.path), error=str(e))
            temp_path.unlink(missing_ok=True)
            raise

        log.info("Catalog saved", path=str(self.path), discs=len(self._records))
