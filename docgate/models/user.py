from datetime import datetime
from typing import Annotated, Optional

from docgate.models.common import Entity, Storage


class User(Entity):
    namespace = "core"
    collection = "users"

    username: Annotated[str, Storage("username")]
    email: Annotated[str, Storage("email")]
    birthdate: Annotated[Optional[datetime], Storage("birthdate")] = None
