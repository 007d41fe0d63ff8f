"""Failures raised while turning a query string into query options.

Every error is detected before the store is touched. ``kind`` is the stable
tag the HTTP layer reports next to the human-readable message.
"""

from __future__ import annotations


class QueryCompileError(Exception):
    kind = "QueryCompileError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotAStructError(QueryCompileError):
    kind = "NotAStruct"

    def __init__(self, value: object):
        name = value.__name__ if isinstance(value, type) else type(value).__name__
        super().__init__(f"entity must be an Entity model class or instance, got {name}")
        self.value = value


class InvalidOperatorError(QueryCompileError):
    kind = "InvalidOperator"

    def __init__(self, operator: str, param: str):
        super().__init__(f"invalid filter operator: {operator}")
        self.operator = operator
        self.param = param


class InvalidDateFormatError(QueryCompileError):
    kind = "InvalidDateFormat"

    def __init__(self, param: str, raw: str):
        super().__init__(f"invalid date format for {param}: {raw!r} is not an RFC 3339 date-time")
        self.param = param
        self.raw = raw


class InvalidFloatFormatError(QueryCompileError):
    kind = "InvalidFloatFormat"

    def __init__(self, param: str, raw: str):
        super().__init__(f"invalid float format for {param}: {raw!r}")
        self.param = param
        self.raw = raw


class InvalidBetweenValueError(QueryCompileError):
    kind = "InvalidBetweenValue"

    def __init__(self, param: str, detail: str):
        super().__init__(f"invalid between value for {param}: {detail}")
        self.param = param
