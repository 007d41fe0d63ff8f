from fastapi import APIRouter

from docgate.api.crud import register_entity_routes
from docgate.models.user import User

# resource path -> entity type served under it
ENTITY_ROUTES = {
    "users": User,
}

router = APIRouter()
for resource, entity_type in ENTITY_ROUTES.items():
    register_entity_routes(router, resource, entity_type)
