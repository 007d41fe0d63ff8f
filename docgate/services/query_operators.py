from __future__ import annotations

from docgate.services.field_descriptors import EntityDescriptor, FieldDescriptor
from docgate.services.query_errors import InvalidOperatorError

# Maps query-string suffixes to the canonical operator they compile to.
# For example, `?created_after=...` compiles exactly like `?created_gt=...`.
OPERATOR_SUFFIXES = {
    "eq": "eq",
    "ne": "ne",
    "gt": "gt",
    "after": "gt",
    "gte": "gte",
    "lt": "lt",
    "before": "lt",
    "lte": "lte",
    "contains": "contains",
    "startswith": "startswith",
    "endswith": "endswith",
    "between": "between",
}

COMPARISON_OPERATORS = {"eq", "ne", "gt", "gte", "lt", "lte"}
PATTERN_OPERATORS = {"contains", "startswith", "endswith"}

# Query parameters that shape the result set instead of filtering it.
RESERVED_PARAMS = {"sort", "page", "pageSize"}


def parse_operator(param: str, wire_name: str) -> str | None:
    """Return the canonical operator `param` applies to `wire_name`.

    None means the parameter does not target this field at all.
    """
    if param == wire_name:
        return "eq"
    prefix = f"{wire_name}_"
    if not param.startswith(prefix):
        return None
    suffix = param[len(prefix):]
    operator = OPERATOR_SUFFIXES.get(suffix)
    if operator is None:
        raise InvalidOperatorError(suffix, param)
    return operator


def match_parameter(param: str, descriptor: EntityDescriptor) -> tuple[FieldDescriptor, str] | None:
    if param in RESERVED_PARAMS:
        return None
    # Longest wire name first: `created_at_gte` belongs to `created_at`, not `created`.
    for field in sorted(descriptor.fields, key=lambda f: len(f.wire_name), reverse=True):
        operator = parse_operator(param, field.wire_name)
        if operator is not None:
            return field, operator
    return None
