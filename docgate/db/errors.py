from __future__ import annotations


class StoreError(Exception):
    """A document store operation failed (connection, timeout, write error)."""


class EntityNotFoundError(StoreError):
    def __init__(self, entity_name: str, key: object):
        super().__init__(f"{entity_name} {key} not found")
        self.entity_name = entity_name
        self.key = key


class EntityDecodeError(StoreError):
    def __init__(self, entity_name: str, key: object, reason: str):
        super().__init__(f"cannot decode {entity_name} {key}: {reason}")
        self.entity_name = entity_name
        self.key = key
