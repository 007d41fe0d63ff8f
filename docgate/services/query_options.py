from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Sequence

from docgate.schemas.query import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, Page, QueryOptions, SortClause
from docgate.services.field_descriptors import EntityDescriptor, describe_entity
from docgate.services.filter_compiler import compile_filter

_LOG = logging.getLogger("docgate.query")


def group_query_params(pairs: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    grouped: dict[str, list[str]] = {}
    for name, value in pairs:
        grouped.setdefault(name, []).append(value)
    return grouped


def parse_sort(values: Sequence[str], descriptor: EntityDescriptor) -> tuple[SortClause, ...]:
    """``sort=-birthdate&sort=username`` -> birthdate desc, then username asc."""
    clauses = []
    for raw in values:
        name = raw.strip()
        direction = "asc"
        if name.startswith("-"):
            direction = "desc"
            name = name[1:]
        if not name:
            continue
        field = descriptor.by_wire_name(name)
        clauses.append(SortClause(field=field.storage_name if field else name, dir=direction))
    return tuple(clauses)


# Both bounds fit in 32 bits, so skip=(page-1)*page_size stays within the
# 64-bit integers MongoDB accepts.
MAX_PAGINATION_VALUE = 2**31 - 1


def _positive_int_or_default(values: Sequence[str] | None, default: int) -> int:
    if not values:
        return default
    raw = str(values[0])
    # Plain ASCII digits only: no sign, whitespace or underscores.
    if not (raw.isascii() and raw.isdigit()):
        return default
    parsed = int(raw)
    return parsed if 0 < parsed <= MAX_PAGINATION_VALUE else default


def parse_pagination(params: Mapping[str, Sequence[str]]) -> Page:
    # Malformed pagination never fails a request; it falls back to defaults.
    return Page(
        page=_positive_int_or_default(params.get("page"), DEFAULT_PAGE),
        page_size=_positive_int_or_default(params.get("pageSize"), DEFAULT_PAGE_SIZE),
    )


def build_query_options(params: Mapping[str, Sequence[str]], entity: Any) -> QueryOptions:
    if not params:
        return QueryOptions()

    descriptor = describe_entity(entity)
    page = parse_pagination(params)
    options = QueryOptions(
        conditions=compile_filter(params, descriptor),
        sort=parse_sort(params.get("sort", ()), descriptor),
        limit=page.limit,
        skip=page.skip,
    )
    _LOG.debug(
        "%s query options: fields=%s sort=%s skip=%s limit=%s",
        descriptor.entity_name,
        list(options.filter),
        [(s.field, s.dir) for s in options.sort],
        options.skip,
        options.limit,
    )
    return options
