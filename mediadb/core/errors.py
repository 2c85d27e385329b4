"""Error taxonomy shared by the store, services and routers."""

from __future__ import annotations


class MediaDBError(Exception):
    """Base class; carries the code and HTTP status the routers answer with."""

    code = "error"
    status_code = 500

    def __init__(self, message: str, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(MediaDBError):
    code = "not_found"
    status_code = 404


class RecordNotFoundError(NotFoundError):
    def __init__(self, collection: str, record_id: str):
        super().__init__(f'Item with id "{record_id}" not found in {collection}')
        self.collection = collection
        self.record_id = record_id


class DuplicateIdError(MediaDBError):
    code = "duplicate_id"
    status_code = 409

    def __init__(self, collection: str, record_id: str):
        super().__init__(f'Item with id "{record_id}" already exists in {collection}')
        self.collection = collection
        self.record_id = record_id


class InvalidInputError(MediaDBError):
    code = "invalid_input"
    status_code = 400


class UnknownCollectionError(InvalidInputError):
    code = "invalid_collection"

    def __init__(self, name: str):
        super().__init__(f"Invalid collection: {name}")
        self.name = name


class InvalidRecordError(InvalidInputError):
    code = "invalid_record"


class AccessDeniedError(MediaDBError):
    code = "access_denied"
    status_code = 403


class RangeNotSatisfiableError(MediaDBError):
    code = "range_not_satisfiable"
    status_code = 416

    def __init__(self, size: int, header: str = ""):
        super().__init__(f"Range not satisfiable: {header!r}")
        self.size = size


class StorageError(MediaDBError):
    """Unreadable or corrupt collection file; surfaced as a generic failure."""

    code = "storage_error"
