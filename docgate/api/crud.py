"""Generic CRUD routes for any Entity type.

Annotations here are evaluated eagerly: the request body and response models
are the entity class captured by ``register_entity_routes``.
"""

import logging
from typing import Any, List

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from docgate.db.session import get_store
from docgate.db.store import DocumentStore, Repository
from docgate.models.common import Entity
from docgate.services.field_descriptors import describe_entity
from docgate.services.query_options import build_query_options, group_query_params

_LOG = logging.getLogger("docgate.api")


def _parse_key_or_400(raw: str) -> ObjectId:
    try:
        return ObjectId(raw)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid id")


def _deleted_message(count: int) -> str:
    label = "entry" if count == 1 else "entries"
    return f"Deleted {count} {label}"


def register_entity_routes(router: APIRouter, resource: str, entity_type: type[Entity]) -> None:
    """Add Create / Read / ReadByFilter / Update / Delete routes for `entity_type`."""
    # Resolve the filter descriptor now so a misdeclared entity fails at startup.
    descriptor = describe_entity(entity_type)
    label = entity_type.__name__
    tags = [label]

    def get_repository(store: DocumentStore = Depends(get_store)) -> Repository:
        return Repository(store, entity_type)

    @router.post(
        f"/{resource}",
        status_code=201,
        response_model=entity_type,
        summary=f"Create {label}",
        tags=tags,
    )
    def create_entity(payload: entity_type, repo: Repository = Depends(get_repository)) -> Any:
        entity = repo.create(payload)
        _LOG.info("created %s %s", label, entity.id)
        return entity

    @router.get(
        f"/{resource}/{{entity_id}}",
        response_model=entity_type,
        summary=f"Read {label} by id",
        tags=tags,
    )
    def read_entity(entity_id: str, repo: Repository = Depends(get_repository)) -> Any:
        return repo.read(_parse_key_or_400(entity_id))

    @router.get(
        f"/{resource}",
        response_model=List[entity_type],
        summary=f"Query {label} records",
        description=(
            "Filter with `<field>[_<op>]=<value>` for "
            + ", ".join(f.wire_name for f in descriptor.fields)
            + "; `sort=[-]<field>` (repeatable), `page`, `pageSize`."
        ),
        tags=tags,
    )
    def read_entities(request: Request, repo: Repository = Depends(get_repository)) -> Any:
        params = group_query_params(request.query_params.multi_items())
        options = build_query_options(params, entity_type)
        return repo.query(options)

    @router.put(
        f"/{resource}/{{entity_id}}",
        response_model=entity_type,
        summary=f"Replace {label}",
        tags=tags,
    )
    def update_entity(entity_id: str, payload: entity_type, repo: Repository = Depends(get_repository)) -> Any:
        entity, modified = repo.update(_parse_key_or_400(entity_id), payload)
        _LOG.info("replaced %s %s modified=%s", label, entity.id, modified)
        return entity

    @router.delete(f"/{resource}/{{entity_id}}", summary=f"Delete {label}", tags=tags)
    def delete_entity(entity_id: str, repo: Repository = Depends(get_repository)) -> Any:
        deleted = repo.delete(_parse_key_or_400(entity_id))
        if deleted == 0:
            return JSONResponse(status_code=404, content={"message": "No entity found to delete"})
        _LOG.info("deleted %s %s", label, entity_id)
        return {"message": _deleted_message(deleted)}
