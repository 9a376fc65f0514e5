"""
Catalog use cases: owner-scoped product CRUD and product image attachments.

Every write resolves the acting account by id and requires a verified e-mail
before looking at the target record.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional
import logging

from webapp.core.config import get_settings
from webapp.core.errors import (
    ConflictError,
    EmailNotVerifiedError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    ProductNotOwnedError,
    UnauthorizedError,
    ValidationError,
)
from webapp.core.utils import utcnow
from webapp.db.models import Image, Product, User
from webapp.domain.images import build_storage_key, is_allowed_content_type
from webapp.repositories.object_storage import FileSystemObjectStore
from webapp.repositories.sql_repository import AccountRepository, CatalogRepository

logger = logging.getLogger(__name__)


@dataclass
class ProductFields:
    """Full product payload used by create and replace."""

    name: str
    sku: str
    manufacturer: str
    quantity: int
    description: Optional[str] = None


@dataclass
class ProductPatch:
    """Partial product payload; None means "leave unchanged"."""

    name: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    manufacturer: Optional[str] = None
    quantity: Optional[int] = None


@dataclass
class ImageUpload:
    file_name: Optional[str]
    content_type: Optional[str]
    data: bytes


def _present(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def _validate_fields(fields: ProductFields) -> None:
    for name in ("name", "sku", "manufacturer"):
        if not _present(getattr(fields, name)):
            raise ValidationError(f"{name} is required", name)
    if fields.quantity is None:
        raise ValidationError("quantity is required", "quantity")
    if isinstance(fields.quantity, bool) or not isinstance(fields.quantity, int):
        raise ValidationError("quantity must be an integer", "quantity")
    if fields.quantity < 0:
        raise ValidationError("Quantity cannot be less than 0", "quantity")


class CatalogService:
    def __init__(
        self,
        repository: CatalogRepository | None = None,
        accounts: AccountRepository | None = None,
        object_store: FileSystemObjectStore | None = None,
        clock: Callable[[], datetime] | None = None,
        max_upload_bytes: int | None = None,
    ) -> None:
        self.repository = repository or CatalogRepository()
        self.accounts = accounts or AccountRepository()
        self.object_store = object_store or FileSystemObjectStore()
        self.clock = clock or utcnow
        self.max_upload_bytes = max_upload_bytes if max_upload_bytes is not None else get_settings().max_upload_bytes

    # -------------------------------------- actors --------------------------------------
    def _resolve_actor(self, actor_id: int) -> User:
        actor = self.accounts.get_by_id(actor_id)
        if not actor:
            raise UnauthorizedError("User not found")
        if not actor.verified:
            raise EmailNotVerifiedError()
        return actor

    # -------------------------------------- products --------------------------------------
    def create_product(self, actor_id: int, fields: ProductFields) -> Product:
        actor = self._resolve_actor(actor_id)
        _validate_fields(fields)
        if self.repository.sku_exists(fields.sku):
            raise ConflictError(f"Product with SKU {fields.sku} already exists")
        now = self.clock()
        product = Product(
            name=fields.name,
            description=fields.description,
            sku=fields.sku,
            manufacturer=fields.manufacturer,
            quantity=fields.quantity,
            owner_user_id=actor.id,
            date_added=now,
            date_last_updated=now,
        )
        product = self.repository.add_product(product)
        logger.info("Created product %s (SKU %s)", product.id, product.sku, extra={"user_id": actor.id, "product_id": product.id})
        return product

    def get_product(self, product_id: int) -> Product:
        product = self.repository.get_product(product_id)
        if not product:
            raise NotFoundError("Product", product_id)
        return product

    def replace_product(self, actor_id: int, product_id: int, fields: ProductFields) -> Product:
        actor = self._resolve_actor(actor_id)
        product = self.get_product(product_id)
        if product.owner_user_id != actor.id:
            logger.warning("User %s tried to replace product %s", actor.id, product_id, extra={"product_id": product_id})
            raise ForbiddenError("You can only update your own products")
        _validate_fields(fields)
        if self.repository.sku_exists(fields.sku, exclude_id=product.id):
            raise ConflictError(f"Another product with SKU {fields.sku} already exists")
        product.name = fields.name
        product.description = fields.description
        product.sku = fields.sku
        product.manufacturer = fields.manufacturer
        product.quantity = fields.quantity
        product.date_last_updated = self.clock()
        return self.repository.save_product(product)

    def patch_product(self, actor_id: int, product_id: int, patch: ProductPatch) -> Product:
        actor = self._resolve_actor(actor_id)
        product = self.repository.get_owned_product(product_id, actor.id)
        if not product:
            raise ProductNotOwnedError(product_id)
        if _present(patch.name):
            product.name = patch.name
        if patch.description is not None:
            product.description = patch.description
        if _present(patch.sku):
            if self.repository.sku_exists(patch.sku, exclude_id=product.id):
                raise ConflictError(f"Another product with SKU {patch.sku} already exists")
            product.sku = patch.sku
        if _present(patch.manufacturer):
            product.manufacturer = patch.manufacturer
        # quantity is not re-checked against >= 0 here
        if patch.quantity is not None:
            product.quantity = patch.quantity
        product.date_last_updated = self.clock()
        return self.repository.save_product(product)

    def delete_product(self, actor_id: int, product_id: int) -> None:
        actor = self._resolve_actor(actor_id)
        self.get_product(product_id)
        product = self.repository.get_owned_product(product_id, actor.id)
        if not product:
            raise ProductNotOwnedError(product_id)
        for image in self.repository.list_images(product.id):
            try:
                self.object_store.delete(image.storage_key)
            except Exception:
                # orphan blob tolerated, record removal proceeds
                logger.error("Failed to delete blob %s of product %s", image.storage_key, product.id, exc_info=True)
        self.repository.delete_product(product.id)
        logger.info("Deleted product %s", product.id, extra={"user_id": actor.id, "product_id": product.id})

    # -------------------------------------- images --------------------------------------
    def upload_image(self, actor_id: int, product_id: int, upload: ImageUpload) -> Image:
        if not upload.data:
            raise ValidationError("File is empty", "file")
        if not is_allowed_content_type(upload.content_type):
            raise ValidationError("Invalid file type. Only jpeg, jpg, png are allowed", "file")
        if self.max_upload_bytes and len(upload.data) > self.max_upload_bytes:
            raise ValidationError("File exceeds the maximum upload size", "file")
        actor = self._resolve_actor(actor_id)
        product = self.get_product(product_id)
        if product.owner_user_id != actor.id:
            raise ForbiddenError("You can only upload images to your own products")

        content_type = upload.content_type.strip().lower()
        key = self.object_store.put(build_storage_key(actor.id, upload.file_name), upload.data, content_type)
        image = Image(
            product_id=product.id,
            user_id=actor.id,
            file_name=upload.file_name or "upload",
            content_type=content_type,
            file_size=len(upload.data),
            storage_key=key,
            date_created=self.clock(),
        )
        try:
            image = self.repository.add_image(image)
        except Exception:
            self._discard_blob(key)
            raise
        logger.info("Stored image %s for product %s", image.image_id, product.id, extra={"storage_key": key, "product_id": product.id})
        return image

    def _discard_blob(self, key: str) -> None:
        try:
            self.object_store.delete(key)
        except Exception:
            logger.error("Could not remove blob %s after failed metadata insert", key, exc_info=True)

    def get_image(self, product_id: int, image_id: int) -> Image:
        image = self.repository.get_image(image_id)
        if not image or image.product_id != product_id:
            raise NotFoundError("Image", image_id)
        if not self.repository.get_product(product_id):
            raise NotFoundError("Image", image_id)
        return image

    def list_images(self, product_id: int) -> list[Image]:
        self.get_product(product_id)
        return self.repository.list_images(product_id)

    def delete_image(self, actor_id: int, product_id: int, image_id: int) -> None:
        actor = self._resolve_actor(actor_id)
        image = self.repository.get_image(image_id)
        if not image or image.product_id != product_id:
            raise NotFoundError("Image", image_id)
        product = self.get_product(product_id)
        if image.user_id != actor.id or product.owner_user_id != actor.id:
            raise ForbiddenError("You can only delete images from your own products")
        try:
            self.object_store.delete(image.storage_key)
        except InternalError:
            logger.error("Failed to delete blob %s, keeping image %s", image.storage_key, image_id, exc_info=True)
            raise
        except Exception as exc:
            logger.error("Failed to delete blob %s, keeping image %s", image.storage_key, image_id, exc_info=True)
            raise InternalError("Failed to delete image", "object_store") from exc
        self.repository.delete_image(image.image_id)
        logger.info("Deleted image %s of product %s", image_id, product_id, extra={"image_id": image_id})
