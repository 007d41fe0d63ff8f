from __future__ import annotations

import logging
from typing import Any, Generic, Iterator, Protocol, TypeVar

from bson import ObjectId
from pydantic import ValidationError

from docgate.db.errors import EntityDecodeError, EntityNotFoundError
from docgate.models.common import KEY_FIELD, Entity
from docgate.schemas.query import QueryOptions

TEntity = TypeVar("TEntity", bound=Entity)

_LOG = logging.getLogger("docgate.store")


class RecordCursor(Protocol):
    """Lazy, forward-only, single-pass sequence of raw documents."""

    def __iter__(self) -> Iterator[dict[str, Any]]:
        ...

    def close(self) -> None:
        ...

    def __enter__(self) -> RecordCursor:
        ...

    def __exit__(self, *exc_info: Any) -> None:
        ...


class DocumentStore(Protocol):
    def insert(self, entity_type: type[Entity], record: dict[str, Any]) -> ObjectId:
        ...

    def get(self, entity_type: type[Entity], key: ObjectId) -> dict[str, Any] | None:
        ...

    def find(self, entity_type: type[Entity], options: QueryOptions) -> RecordCursor:
        ...

    def replace(self, entity_type: type[Entity], key: ObjectId, record: dict[str, Any]) -> int:
        ...

    def delete(self, entity_type: type[Entity], key: ObjectId) -> int:
        ...


class Repository(Generic[TEntity]):
    """Typed CRUD over one entity type, backed by any DocumentStore."""

    def __init__(self, store: DocumentStore, entity_type: type[TEntity]):
        self.store = store
        self.entity_type = entity_type

    def _decode(self, doc: dict[str, Any]) -> TEntity:
        try:
            return self.entity_type.from_document(doc)
        except ValidationError as exc:
            key = doc.get(KEY_FIELD)
            _LOG.warning("decode failed for %s %s", self.entity_type.__name__, key)
            raise EntityDecodeError(self.entity_type.__name__, key, str(exc)) from exc

    def create(self, entity: TEntity) -> TEntity:
        entity = entity.with_key(ObjectId())
        key = self.store.insert(self.entity_type, entity.to_document())
        return entity.with_key(key)

    def read(self, key: ObjectId) -> TEntity:
        doc = self.store.get(self.entity_type, key)
        if doc is None:
            raise EntityNotFoundError(self.entity_type.__name__, key)
        return self._decode(doc)

    def query(self, options: QueryOptions) -> list[TEntity]:
        with self.store.find(self.entity_type, options) as cursor:
            return [self._decode(doc) for doc in cursor]

    def update(self, key: ObjectId, entity: TEntity) -> tuple[TEntity, int]:
        entity = entity.with_key(key)
        modified = self.store.replace(self.entity_type, key, entity.to_document())
        return entity, modified

    def delete(self, key: ObjectId) -> int:
        return self.store.delete(self.entity_type, key)
