from __future__ import annotations

import copy
import operator
import re
from threading import Lock
from typing import Any, Callable, Iterator

from bson import ObjectId

from docgate.db.errors import StoreError
from docgate.db.mongo import mongo_filter, mongo_sort
from docgate.models.common import KEY_FIELD, Entity
from docgate.schemas.query import QueryOptions

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "$eq": operator.eq,
    "$ne": operator.ne,
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}


def _field_matches(value: Any, condition: Any) -> bool:
    if not isinstance(condition, dict):
        return value == condition
    for op, operand in condition.items():
        if op == "$options":
            continue
        if op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or re.search(operand, value, flags) is None:
                return False
            continue
        compare = _COMPARATORS.get(op)
        if compare is None:
            raise StoreError(f"unsupported filter operator {op}")
        try:
            if not compare(value, operand):
                return False
        except TypeError:
            # Missing fields and mismatched types never satisfy a range.
            return False
    return True


def matches(doc: dict[str, Any], filter_doc: dict[str, Any]) -> bool:
    for key, condition in filter_doc.items():
        if key == "$and":
            if not all(matches(doc, clause) for clause in condition):
                return False
        elif not _field_matches(doc.get(key), condition):
            return False
    return True


def _sort_key(field: str) -> Callable[[dict[str, Any]], tuple]:
    # Missing values order first, as null does in MongoDB.
    def key(doc: dict[str, Any]) -> tuple:
        value = doc.get(field)
        return (0, 0) if value is None else (1, value)

    return key


class MemoryRecordCursor:
    def __init__(self, docs: list[dict[str, Any]]):
        self._docs = docs
        self.closed = False

    def __iter__(self) -> Iterator[dict[str, Any]]:
        while self._docs and not self.closed:
            yield self._docs.pop(0)

    def close(self) -> None:
        self.closed = True
        self._docs = []

    def __enter__(self) -> MemoryRecordCursor:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class InMemoryStore:
    """Dictionary-backed document store with MongoDB filter semantics.

    Evaluates the same native filter and sort MongoStore sends to the server,
    so handlers can be exercised without a database. Safe to share between
    concurrent requests.
    """

    def __init__(self):
        self._collections: dict[tuple[str, str], dict[ObjectId, dict[str, Any]]] = {}
        self._lock = Lock()

    def _collection(self, entity_type: type[Entity]) -> dict[ObjectId, dict[str, Any]]:
        return self._collections.setdefault((entity_type.namespace, entity_type.collection), {})

    def insert(self, entity_type: type[Entity], record: dict[str, Any]) -> ObjectId:
        doc = copy.deepcopy(record)
        key = doc.get(KEY_FIELD) or ObjectId()
        doc[KEY_FIELD] = key
        with self._lock:
            collection = self._collection(entity_type)
            if key in collection:
                raise StoreError(f"creating {entity_type.__name__}: duplicate key {key}")
            collection[key] = doc
        return key

    def get(self, entity_type: type[Entity], key: ObjectId) -> dict[str, Any] | None:
        with self._lock:
            doc = self._collection(entity_type).get(key)
            return copy.deepcopy(doc) if doc is not None else None

    def find(self, entity_type: type[Entity], options: QueryOptions) -> MemoryRecordCursor:
        filter_doc = mongo_filter(options)
        with self._lock:
            docs = [copy.deepcopy(d) for d in self._collection(entity_type).values() if matches(d, filter_doc)]
        for field, direction in reversed(mongo_sort(options)):
            try:
                docs.sort(key=_sort_key(field), reverse=direction < 0)
            except TypeError as exc:
                raise StoreError(f"cannot sort {entity_type.__name__} by {field}: {exc}") from exc
        if options.skip > 0:
            docs = docs[options.skip:]
        if options.limit > 0:
            docs = docs[: options.limit]
        return MemoryRecordCursor(docs)

    def replace(self, entity_type: type[Entity], key: ObjectId, record: dict[str, Any]) -> int:
        doc = copy.deepcopy(record)
        doc[KEY_FIELD] = key
        with self._lock:
            collection = self._collection(entity_type)
            if key not in collection or collection[key] == doc:
                return 0
            collection[key] = doc
            return 1

    def delete(self, entity_type: type[Entity], key: ObjectId) -> int:
        with self._lock:
            return 1 if self._collection(entity_type).pop(key, None) is not None else 0

    def clear(self) -> None:
        with self._lock:
            self._collections.clear()
