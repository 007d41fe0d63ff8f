from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, ClassVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict
from pydantic.fields import FieldInfo

KEY_FIELD = "_id"


class FieldType(str, enum.Enum):
    STRING = "string"
    FLOAT = "float"
    DATETIME = "datetime"


@dataclass(frozen=True)
class Storage:
    """Annotated marker naming the document field a model field is stored under.

    Fields carrying it are filterable from the query string:

        username: Annotated[str, Storage("username")]
    """

    name: str


def storage_name(field: FieldInfo) -> str | None:
    for item in field.metadata:
        if isinstance(item, Storage):
            return item.name
    return None


class Entity(BaseModel):
    """Base for every document type served by the generic CRUD routes.

    Subclasses set ``namespace`` (database) and ``collection``. The key is
    kept on the wire as the hex form of the document's ObjectId.
    """

    model_config = ConfigDict(populate_by_name=True)

    namespace: ClassVar[str] = ""
    collection: ClassVar[str] = ""

    id: str | None = None

    def key(self) -> ObjectId | None:
        if self.id is None:
            return None
        return ObjectId(self.id)

    def with_key(self, key: ObjectId) -> Entity:
        return self.model_copy(update={"id": str(key)})

    def to_document(self) -> dict[str, Any]:
        doc: dict[str, Any] = {}
        if self.id is not None:
            doc[KEY_FIELD] = ObjectId(self.id)
        for name, field in type(self).model_fields.items():
            if name == "id":
                continue
            doc[storage_name(field) or name] = getattr(self, name)
        return doc

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> Entity:
        data: dict[str, Any] = {}
        for name, field in cls.model_fields.items():
            if name == "id":
                continue
            key = storage_name(field) or name
            if key in doc:
                data[name] = doc[key]
        if doc.get(KEY_FIELD) is not None:
            data["id"] = str(doc[KEY_FIELD])
        return cls.model_validate(data)
