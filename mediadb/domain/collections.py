"""Collection names and the record schemas validated at the store boundary."""
from __future__ import annotations

from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from mediadb.core.errors import InvalidRecordError, UnknownCollectionError

COLLECTIONS: tuple[str, ...] = (
    "history",
    "songs",
    "discography",
    "tags",
    "members",
    "settings",
    "playHistory",
    "favorites",
    "goods",
    "gallery_metadata",
)


class RecordModel(BaseModel):
    """Fields every record shares. Unknown fields are accepted and kept as-is."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    deletedAt: Optional[str] = None


class TitledRecord(RecordModel):
    title: str


class MemberRecord(RecordModel):
    name: str


RECORD_MODELS: dict[str, type[RecordModel]] = {
    "songs": TitledRecord,
    "history": TitledRecord,
    "discography": TitledRecord,
    "members": MemberRecord,
}


def is_valid_collection(name: str | None) -> bool:
    return bool(name) and name in COLLECTIONS


def ensure_collection(name: str | None) -> str:
    if not is_valid_collection(name):
        raise UnknownCollectionError(str(name))
    return name  # type: ignore[return-value]


def validate_record(collection: str, record: Any) -> dict:
    """Check ``record`` against the collection schema and return it unchanged."""
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"Records in {collection} must be JSON objects")
    model = RECORD_MODELS.get(collection, RecordModel)
    try:
        model.model_validate(dict(record))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidRecordError(f"Invalid record for {collection}: {problems}") from exc
    return dict(record)
