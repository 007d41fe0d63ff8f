from pydantic import BaseModel, ConfigDict
from types import MappingProxyType
from typing import Any, Literal, Mapping, Optional, Tuple

Op = Literal["eq", "ne", "gt", "gte", "lt", "lte", "contains", "startswith", "endswith", "between"]
Dir = Literal["asc", "desc"]

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 10

_frozen = ConfigDict(frozen=True, arbitrary_types_allowed=True)

class Predicate(BaseModel):
    """One comparison on one field; ``upper`` is only set for ``between``."""
    model_config = _frozen

    op: Op
    value: Any
    upper: Optional[Any] = None

class FieldCondition(BaseModel):
    """Every predicate on one storage field, combined with AND."""
    model_config = _frozen

    field: str
    predicates: Tuple[Predicate, ...]

    @property
    def is_conjunction(self) -> bool:
        return len(self.predicates) > 1

class SortClause(BaseModel):
    model_config = _frozen

    field: str
    dir: Dir

class Page(BaseModel):
    model_config = _frozen

    page: int = DEFAULT_PAGE
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size

class QueryOptions(BaseModel):
    model_config = _frozen

    conditions: Tuple[FieldCondition, ...] = ()
    sort: Tuple[SortClause, ...] = ()
    limit: int = DEFAULT_PAGE_SIZE
    skip: int = 0

    @property
    def filter(self) -> Mapping[str, FieldCondition]:
        return MappingProxyType({c.field: c for c in self.conditions})
