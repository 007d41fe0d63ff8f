from __future__ import annotations

import types
import typing
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Any, Union

from docgate.models.common import Entity, FieldType, storage_name
from docgate.services.query_errors import NotAStructError


@dataclass(frozen=True)
class FieldDescriptor:
    wire_name: str
    storage_name: str
    value_type: FieldType


@dataclass(frozen=True)
class EntityDescriptor:
    entity_name: str
    fields: tuple[FieldDescriptor, ...]

    def by_wire_name(self, wire_name: str) -> FieldDescriptor | None:
        for field in self.fields:
            if field.wire_name == wire_name:
                return field
        return None


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _value_type(annotation: Any) -> FieldType:
    target = _unwrap_optional(annotation)
    if target is datetime:
        return FieldType.DATETIME
    if target is float:
        return FieldType.FLOAT
    return FieldType.STRING


@lru_cache(maxsize=None)
def _describe_type(entity_type: type[Entity]) -> EntityDescriptor:
    fields = []
    for name, info in entity_type.model_fields.items():
        stored_as = storage_name(info)
        wire_name = info.alias or name
        if not stored_as or not wire_name:
            continue
        fields.append(FieldDescriptor(wire_name, stored_as, _value_type(info.annotation)))
    return EntityDescriptor(entity_name=entity_type.__name__, fields=tuple(fields))


def describe_entity(entity: Any) -> EntityDescriptor:
    """Return the filterable fields of an entity class or instance.

    Fields are listed in declaration order; a field without a ``Storage``
    marker is not filterable and is left out. Raises ``NotAStructError`` for
    anything that is not an ``Entity`` model.
    """
    entity_type = entity if isinstance(entity, type) else type(entity)
    if not issubclass(entity_type, Entity):
        raise NotAStructError(entity)
    return _describe_type(entity_type)
