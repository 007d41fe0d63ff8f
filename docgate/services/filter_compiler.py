from __future__ import annotations

import logging
import re
from typing import Mapping, Sequence

from docgate.schemas.query import FieldCondition, Predicate
from docgate.services.field_descriptors import EntityDescriptor, FieldDescriptor
from docgate.services.query_operators import COMPARISON_OPERATORS, PATTERN_OPERATORS, match_parameter
from docgate.services.value_coercion import coerce_value, parse_between

_LOG = logging.getLogger("docgate.query")


def build_predicate(field: FieldDescriptor, param: str, op: str, raw: str) -> Predicate:
    if op in COMPARISON_OPERATORS:
        return Predicate(op=op, value=coerce_value(field, param, raw))
    if op in PATTERN_OPERATORS:
        # Matched case-insensitively; the user's text is always literal.
        return Predicate(op=op, value=re.escape(raw))
    if op == "between":
        start, end = parse_between(param, raw)
        return Predicate(op="between", value=start, upper=end)
    raise ValueError(f"unsupported operator {op!r}")


def compile_filter(
    params: Mapping[str, Sequence[str]],
    descriptor: EntityDescriptor,
) -> tuple[FieldCondition, ...]:
    """Compile query parameters into one condition per storage field.

    Predicates on the same field are accumulated, never overwritten:
    ``age_gte=18&age_lte=65&age_ne=30`` yields a single three-way conjunction
    on ``age``. The first failure aborts the whole filter.
    """
    collected: dict[str, list[Predicate]] = {}
    for param, values in params.items():
        if not values:
            continue
        matched = match_parameter(param, descriptor)
        if matched is None:
            continue
        field, op = matched
        predicate = build_predicate(field, param, op, values[0])
        collected.setdefault(field.storage_name, []).append(predicate)

    conditions = tuple(
        FieldCondition(field=storage_name, predicates=tuple(predicates))
        for storage_name, predicates in collected.items()
    )
    _LOG.debug(
        "compiled %s filter: %s",
        descriptor.entity_name,
        {c.field: [p.op for p in c.predicates] for c in conditions},
    )
    return conditions
