import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from marketplace.core.exceptions import CatalogError, PersistenceError

logger = logging.getLogger(__name__)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if isinstance(exc, PersistenceError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "errors": exc.errors}
    )


def register_exception_handlers(app: FastAPI) -> None:
    # subclasses resolve to this handler through the exception's MRO
    app.add_exception_handler(CatalogError, catalog_error_handler)
