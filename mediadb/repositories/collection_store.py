"""
JSON-file persistence for named collections.

Each collection lives in ``<data_dir>/<collection>.json`` as one JSON array and
is rewritten in full on every mutation. Reads go through a short-lived
``TTLCache`` that is refreshed synchronously on save, so a read right after a
write sees the write without touching disk.

Writes are serialized per collection with a lock held across the whole
load-mutate-save sequence, and a read that refills the cache takes the same
lock. Separate processes sharing the data directory are not coordinated, and
a crash mid-write can leave a truncated file.
"""

from __future__ import annotations

import copy
import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping, Optional

from mediadb.core.errors import (
    DuplicateIdError,
    InvalidRecordError,
    NotFoundError,
    RecordNotFoundError,
    StorageError,
)
from mediadb.core.utils import resolve_within_root, utc_now_iso
from mediadb.domain.collections import COLLECTIONS, ensure_collection, validate_record
from mediadb.repositories.cache import TTLCache

logger = logging.getLogger(__name__)

Record = dict
Predicate = Callable[[Record], bool]

SNAPSHOT_DIRNAME = "backups"


class CollectionStore:
    """CRUD helpers over the per-collection JSON files."""

    def __init__(self, data_dir: Path | str, cache: TTLCache | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.cache = cache if cache is not None else TTLCache()
        self._locks = {name: threading.RLock() for name in COLLECTIONS}

    # -------------------------- files --------------------------
    def _file_path(self, collection: str) -> Path:
        return self.data_dir / f"{collection}.json"

    def _read_file(self, collection: str) -> list:
        path = self._file_path(collection)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read {path.name}: {exc}") from exc
        try:
            data = json.loads(content)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt collection file {path.name}: {exc}") from exc
        if not isinstance(data, list):
            raise StorageError(f"Collection file {path.name} must contain a JSON array")
        return data

    def _write_file(self, collection: str, records: list) -> None:
        path = self._file_path(collection)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to write {path.name}: {exc}") from exc
        logger.debug("wrote %d records to %s", len(records), path)

    # -------------------------- bootstrap --------------------------
    def initialize(self) -> list[str]:
        """Create the data directory and an empty file for each missing collection."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        created = []
        for collection in COLLECTIONS:
            with self._locks[collection]:
                if not self._file_path(collection).exists():
                    self._write_file(collection, [])
                    created.append(collection)
        if created:
            logger.info("initialized collections: %s", ", ".join(created))
        return created

    # -------------------------- whole collection --------------------------
    def _load(self, collection: str) -> list:
        cached = self.cache.get(collection)
        if cached is not None:
            return copy.deepcopy(cached)
        data = self._read_file(collection)
        self.cache.set(collection, data)
        return copy.deepcopy(data)

    def _save(self, collection: str, records: list) -> None:
        snapshot = copy.deepcopy(records)
        self._write_file(collection, snapshot)
        self.cache.set(collection, snapshot)

    def load_all(self, collection: str) -> list[Record]:
        ensure_collection(collection)
        with self._locks[collection]:
            return self._load(collection)

    def save_all(self, collection: str, records: Iterable[Mapping[str, Any]]) -> None:
        ensure_collection(collection)
        validated = self.validate_records(collection, records)
        with self._locks[collection]:
            self._save(collection, validated)

    def validate_records(self, collection: str, records: Iterable[Any]) -> list[Record]:
        """Validate a full array: every item must match the schema and ids must be unique."""
        validated = [validate_record(collection, record) for record in records]
        seen: set[str] = set()
        for record in validated:
            if record["id"] in seen:
                raise InvalidRecordError(f'Duplicate id "{record["id"]}" in {collection}')
            seen.add(record["id"])
        return validated

    # -------------------------- records --------------------------
    def get_by_id(self, collection: str, record_id: str) -> Optional[Record]:
        for record in self.load_all(collection):
            if record.get("id") == record_id:
                return record
        return None

    def create(self, collection: str, record: Mapping[str, Any]) -> Record:
        ensure_collection(collection)
        item = validate_record(collection, record)
        with self._locks[collection]:
            data = self._load(collection)
            if any(existing.get("id") == item["id"] for existing in data):
                raise DuplicateIdError(collection, item["id"])
            data.append(item)
            self._save(collection, data)
        return copy.deepcopy(item)

    def update(self, collection: str, record_id: str, fields: Mapping[str, Any]) -> Record:
        ensure_collection(collection)
        with self._locks[collection]:
            data = self._load(collection)
            index = _index_of(data, record_id)
            if index is None:
                raise RecordNotFoundError(collection, record_id)
            merged = _merge(data[index], fields)
            data[index] = validate_record(collection, merged)
            self._save(collection, data)
            return copy.deepcopy(data[index])

    def remove(self, collection: str, record_id: str) -> bool:
        ensure_collection(collection)
        with self._locks[collection]:
            data = self._load(collection)
            index = _index_of(data, record_id)
            if index is None:
                return False
            del data[index]
            self._save(collection, data)
        return True

    def soft_delete(self, collection: str, record_id: str) -> Record:
        return self.update(collection, record_id, {"deletedAt": utc_now_iso()})

    def query(self, collection: str, predicate: Predicate) -> list[Record]:
        return [record for record in self.load_all(collection) if predicate(record)]

    def bulk_update(self, collection: str, updates: Iterable[Mapping[str, Any]]) -> None:
        """Apply ``[{"id": ..., "data": {...}}, ...]`` with a single load and a single write.

        Ids that are not in the collection are skipped.
        """
        ensure_collection(collection)
        with self._locks[collection]:
            data = self._load(collection)
            for entry in updates:
                index = _index_of(data, entry.get("id"))
                if index is None:
                    continue
                merged = _merge(data[index], entry.get("data") or {})
                data[index] = validate_record(collection, merged)
            self._save(collection, data)

    def clear_cache(self, collection: str | None = None) -> None:
        if collection is not None:
            ensure_collection(collection)
        self.cache.clear(collection)

    # -------------------------- backups --------------------------
    def export_all(self) -> dict[str, list[Record]]:
        return {collection: self.load_all(collection) for collection in COLLECTIONS}

    def restore_collections(self, payload: Mapping[str, Any]) -> list[str]:
        """Overwrite every known collection whose value in ``payload`` is an array.

        All arrays are validated before anything is written; the cache is
        cleared afterwards.
        """
        staged = {
            collection: self.validate_records(collection, payload[collection])
            for collection in COLLECTIONS
            if isinstance(payload.get(collection), list)
        }
        for collection, records in staged.items():
            with self._locks[collection]:
                self._save(collection, records)
        self.clear_cache()
        logger.info("restored collections: %s", ", ".join(staged) or "(none)")
        return list(staged)

    @property
    def snapshot_dir(self) -> Path:
        return self.data_dir / SNAPSHOT_DIRNAME

    def create_snapshot(self) -> Path:
        """Copy every collection into ``backups/backup-<timestamp>/``."""
        stamp = utc_now_iso().replace(":", "-").replace(".", "-")
        target = self.snapshot_dir / f"backup-{stamp}"
        target.mkdir(parents=True, exist_ok=True)
        for collection, records in self.export_all().items():
            (target / f"{collection}.json").write_text(
                json.dumps(records, ensure_ascii=False, indent=2), encoding="utf-8"
            )
        logger.info("created snapshot %s", target)
        return target

    def list_snapshots(self) -> list[str]:
        if not self.snapshot_dir.exists():
            return []
        names = [p.name for p in self.snapshot_dir.iterdir() if p.is_dir()]
        return sorted(names, reverse=True)

    def restore_snapshot(self, name: str) -> list[str]:
        source = resolve_within_root(self.snapshot_dir, name)
        if not source.is_dir():
            raise NotFoundError(f"Snapshot not found: {name}")
        payload = {}
        for collection in COLLECTIONS:
            path = source / f"{collection}.json"
            if not path.exists():
                continue
            try:
                payload[collection] = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                raise StorageError(f"Unreadable snapshot file {path.name}: {exc}") from exc
        return self.restore_collections(payload)


def _index_of(data: list, record_id: Any) -> Optional[int]:
    for index, record in enumerate(data):
        if isinstance(record, dict) and record.get("id") == record_id:
            return index
    return None


def _merge(existing: Mapping[str, Any], fields: Mapping[str, Any]) -> Record:
    merged = {**existing, **fields, "updatedAt": utc_now_iso()}
    merged["id"] = existing["id"]
    return merged
