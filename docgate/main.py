import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from docgate.api.router import ENTITY_ROUTES, router as entity_router
from docgate.core.config import settings
from docgate.core.error_handlers import install_error_handlers
from docgate.core.http_hardening import install_http_hardening
from docgate.db.session import close_client

_LOG = logging.getLogger("docgate")


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_client()


app = FastAPI(title=settings.APP_NAME, version="0.1.0", lifespan=lifespan)
if settings.ALLOW_NULL_ORIGIN:
    _LOG.warning("allowing requests from any origin; only for development/testing")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "Content-Length", "Content-Type", "Authorization"],
)
install_http_hardening(app)
install_error_handlers(app)

app.include_router(entity_router, prefix=settings.API_PREFIX)

@app.get("/", include_in_schema=False)
def landing():
    return JSONResponse({"title": settings.APP_NAME, "body": "Endpoints: " + ", ".join(ENTITY_ROUTES)})

@app.get("/health")
def health():
    return {"status": "ok"}


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
