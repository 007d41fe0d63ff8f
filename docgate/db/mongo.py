"""MongoDB adapter for the generic document store interface.

Renders compiled query options into pymongo's native filter and sort
syntax, and wraps driver failures in ``StoreError`` so callers see one error
family regardless of backend.
"""

from __future__ import annotations

import logging
from typing import Any, Iterator

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.cursor import Cursor
from pymongo.errors import PyMongoError

from docgate.db.errors import StoreError
from docgate.models.common import KEY_FIELD, Entity
from docgate.schemas.query import Predicate, QueryOptions

_LOG = logging.getLogger("docgate.store")

_COMPARISON_OPERATORS = {
    "eq": "$eq",
    "ne": "$ne",
    "gt": "$gt",
    "gte": "$gte",
    "lt": "$lt",
    "lte": "$lte",
}


def predicate_to_mongo(predicate: Predicate) -> dict[str, Any]:
    op = predicate.op
    if op in _COMPARISON_OPERATORS:
        return {_COMPARISON_OPERATORS[op]: predicate.value}
    if op == "contains":
        return {"$regex": predicate.value, "$options": "i"}
    if op == "startswith":
        return {"$regex": f"^{predicate.value}", "$options": "i"}
    if op == "endswith":
        return {"$regex": f"{predicate.value}$", "$options": "i"}
    if op == "between":
        return {"$gte": predicate.value, "$lte": predicate.upper}
    raise ValueError(f"unsupported operator {op!r}")


def mongo_filter(options: QueryOptions) -> dict[str, Any]:
    """Native filter document for the compiled conditions.

    A field with several predicates becomes a group of per-field clauses in
    the top-level ``$and``; MongoDB does not accept ``$and`` under a field.
    """
    doc: dict[str, Any] = {}
    conjunction: list[dict[str, Any]] = []
    for condition in options.conditions:
        if condition.is_conjunction:
            conjunction.extend({condition.field: predicate_to_mongo(p)} for p in condition.predicates)
        else:
            doc[condition.field] = predicate_to_mongo(condition.predicates[0])
    if conjunction:
        doc["$and"] = conjunction
    return doc


def mongo_sort(options: QueryOptions) -> list[tuple[str, int]]:
    return [(clause.field, ASCENDING if clause.dir == "asc" else DESCENDING) for clause in options.sort]


class MongoRecordCursor:
    def __init__(self, cursor: Cursor):
        self._cursor = cursor

    def __iter__(self) -> Iterator[dict[str, Any]]:
        try:
            yield from self._cursor
        except PyMongoError as exc:
            _LOG.warning("cursor read failed: %s", exc)
            raise StoreError(f"reading query results: {exc}") from exc

    def close(self) -> None:
        self._cursor.close()

    def __enter__(self) -> MongoRecordCursor:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class MongoStore:
    def __init__(self, client: MongoClient, *, max_time_ms: int | None = None):
        self.client = client
        self.max_time_ms = max_time_ms

    def _collection(self, entity_type: type[Entity]) -> Collection:
        return self.client[entity_type.namespace][entity_type.collection]

    def _failed(self, action: str, entity_type: type[Entity], exc: PyMongoError) -> StoreError:
        _LOG.warning("%s %s.%s failed: %s", action, entity_type.namespace, entity_type.collection, exc)
        return StoreError(f"{action} {entity_type.__name__}: {exc}")

    def insert(self, entity_type: type[Entity], record: dict[str, Any]) -> ObjectId:
        try:
            result = self._collection(entity_type).insert_one(record)
        except PyMongoError as exc:
            raise self._failed("creating", entity_type, exc) from exc
        return result.inserted_id

    def get(self, entity_type: type[Entity], key: ObjectId) -> dict[str, Any] | None:
        try:
            return self._collection(entity_type).find_one({KEY_FIELD: key})
        except PyMongoError as exc:
            raise self._failed("reading", entity_type, exc) from exc

    def find(self, entity_type: type[Entity], options: QueryOptions) -> MongoRecordCursor:
        kwargs: dict[str, Any] = {}
        sort = mongo_sort(options)
        if sort:
            kwargs["sort"] = sort
        if options.limit > 0:
            kwargs["limit"] = options.limit
        if options.skip > 0:
            kwargs["skip"] = options.skip
        if self.max_time_ms:
            kwargs["max_time_ms"] = self.max_time_ms
        try:
            cursor = self._collection(entity_type).find(mongo_filter(options), **kwargs)
        except PyMongoError as exc:
            raise self._failed("finding", entity_type, exc) from exc
        return MongoRecordCursor(cursor)

    def replace(self, entity_type: type[Entity], key: ObjectId, record: dict[str, Any]) -> int:
        try:
            result = self._collection(entity_type).replace_one({KEY_FIELD: key}, record)
        except PyMongoError as exc:
            raise self._failed("updating", entity_type, exc) from exc
        return result.modified_count

    def delete(self, entity_type: type[Entity], key: ObjectId) -> int:
        try:
            result = self._collection(entity_type).delete_one({KEY_FIELD: key})
        except PyMongoError as exc:
            raise self._failed("deleting", entity_type, exc) from exc
        return result.deleted_count
