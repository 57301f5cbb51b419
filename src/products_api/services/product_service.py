"""
Product service for the Products API.

Coordinates the document store (product records) and the object storage
(product images). Neither store takes part in a transaction, so every
operation orders its steps to limit what an interruption can leave behind.
"""

import logging
from typing import Any, Dict, List, Sequence

from database.document_store import DocumentStore
from products_api.adapters.storage import ObjectStorage
from products_api.schemas import ImageUpload, ProductCreate, ProductUpdate
from products_api.utils.decorators import log_execution_time

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "products"


class ProductService:
    """Service for product CRUD with image lifecycle management"""

    def __init__(
        self,
        document_store: DocumentStore,
        object_storage: ObjectStorage,
        collection: str = DEFAULT_COLLECTION,
    ):
        self.document_store = document_store
        self.object_storage = object_storage
        self.collection = collection

    def _upload_images(self, images: Sequence[ImageUpload], product_id: str) -> List[str]:
        urls = []
        for image in images:
            url = self.object_storage.upload(image, self.collection, product_id)
            if url:
                urls.append(url)
        return urls

    def _delete_images(self, urls: Sequence[str], product_id: str) -> None:
        for url in urls:
            self.object_storage.delete(url, self.collection, product_id)

    @log_execution_time
    def list_products(self) -> List[Dict[str, Any]]:
        return self.document_store.read_all(self.collection)

    @log_execution_time
    def get_product(self, product_id: str) -> Dict[str, Any]:
        return self.document_store.read_by_id(self.collection, product_id)

    @log_execution_time
    def create_product(self, payload: ProductCreate) -> Dict[str, Any]:
        """
        Create a product and upload its images.

        The id is allocated up front so images are stored under the
        product's own folder.
        """
        product_id = self.document_store.new_document_id()

        data = payload.scalar_fields()
        data["images"] = self._upload_images(payload.images, product_id)

        record = self.document_store.create(self.collection, data, document_id=product_id)
        logger.info(f"Created product {product_id} with {len(data['images'])} image(s)")
        return record

    @log_execution_time
    def update_product(self, product_id: str, payload: ProductUpdate) -> Dict[str, Any]:
        """
        Merge supplied fields into a product and reconcile its images.

        New images are appended to the existing list. When new images are
        supplied together with a truthy ``replace_images`` flag, the existing
        images are deleted from storage first and the list starts empty.
        A replace flag without new images leaves the images untouched.
        """
        document = self.document_store.read_by_id(self.collection, product_id)
        existing_images = document.get("images") or []

        image_urls = list(existing_images)
        if payload.images:
            if payload.should_replace_images:
                self._delete_images(existing_images, product_id)
                image_urls = []
            image_urls.extend(self._upload_images(payload.images, product_id))

        fields = payload.scalar_fields()
        fields["images"] = image_urls

        return self.document_store.update(self.collection, product_id, fields)

    @log_execution_time
    def delete_product(self, product_id: str) -> None:
        """Delete a product's images, then the product document."""
        document = self.document_store.read_by_id(self.collection, product_id)
        self._delete_images(document.get("images") or [], product_id)
        self.document_store.delete(self.collection, product_id)
        logger.info(f"Deleted product {product_id}")
