import logging
from contextlib import asynccontextmanager
from textwrap import dedent
from typing import Optional

import pydantic
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.routing import APIRoute

from database.document_store import DocumentNotFoundError, DocumentStore
from database.local import get_document_store
from products_api.adapters.storage import ObjectStorage
from products_api.config.settings import Settings
from products_api.errors import (
    handle_broad_exceptions,
    handle_document_not_found,
    handle_pydantic_validation_errors,
    handle_request_validation_errors,
)
from products_api.routers.health import router as health_router
from products_api.routers.products import router as products_router
from products_api.services.product_service import ProductService

# Set up logging
logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def build_document_store(settings: Settings) -> DocumentStore:
    return get_document_store(
        backend=settings.document_store,
        sqlite_db_path=settings.sqlite_db_path,
        mongodb_uri=settings.mongodb_uri,
        mongodb_database=settings.mongodb_database,
        collections=[settings.products_collection],
    )


def create_app(
    settings: Optional[Settings] = None,
    document_store: Optional[DocumentStore] = None,
    object_storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    """
    Create a FastAPI application.

    The document store and object storage clients are created here once per
    process unless the caller passes its own, and are closed on shutdown.
    """
    settings = settings or Settings()
    configure_logging(settings)

    document_store = document_store or build_document_store(settings)
    object_storage = object_storage or ObjectStorage.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        logger.info("closing document store")
        document_store.close()

    app = FastAPI(
        title="Products API",
        summary="Manage products and their images",
        version="v1",
        description=dedent(
            """\
        Products are stored as documents; product images are stored in object
        storage and referenced from the product by public URL.
        """
        ),
        docs_url="/",  # its easier to find the docs when they live on the base url
        generate_unique_id_function=custom_generate_unique_id,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.document_store = document_store
    app.state.object_storage = object_storage
    app.state.product_service = ProductService(
        document_store=document_store,
        object_storage=object_storage,
        collection=settings.products_collection,
    )

    app.include_router(products_router, tags=["products"])
    app.include_router(health_router, tags=["health"])

    app.add_exception_handler(
        exc_class_or_status_code=pydantic.ValidationError,
        handler=handle_pydantic_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=RequestValidationError,
        handler=handle_request_validation_errors,
    )
    app.add_exception_handler(
        exc_class_or_status_code=DocumentNotFoundError,
        handler=handle_document_not_found,
    )
    app.middleware("http")(handle_broad_exceptions)

    return app


def custom_generate_unique_id(route: APIRoute):
    """
    Generate prettier `operationId`s in the OpenAPI schema.

    These become the function names in generated client SDKs.
    """
    return f"{route.tags[0]}-{route.name}"


if __name__ == "__main__":
    import uvicorn

    app = create_app()
    uvicorn.run(app, host="0.0.0.0", port=8000)
