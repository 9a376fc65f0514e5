"""Product and image schemas for the catalog endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class ProductRequest(BaseModel):
    """Full product payload (POST and PUT)."""
    name: str
    description: Optional[str] = Field(None, max_length=1000)
    sku: str
    manufacturer: str
    quantity: int = Field(ge=0, strict=True)

    @field_validator("name", "sku", "manufacturer")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


class ProductPatchRequest(BaseModel):
    """Partial update: omitted, null or blank fields are left unchanged."""
    name: Optional[str] = None
    description: Optional[str] = Field(None, max_length=1000)
    sku: Optional[str] = None
    manufacturer: Optional[str] = None
    quantity: Optional[int] = Field(None, strict=True)


class ProductResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    sku: str
    manufacturer: str
    quantity: int
    dateAdded: datetime
    dateLastUpdated: datetime
    ownerUserId: int

    @classmethod
    def from_model(cls, product) -> "ProductResponse":
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            sku=product.sku,
            manufacturer=product.manufacturer,
            quantity=product.quantity,
            dateAdded=product.date_added,
            dateLastUpdated=product.date_last_updated,
            ownerUserId=product.owner_user_id,
        )


class ImageResponse(BaseModel):
    """Image metadata; ``s3_bucket_path`` carries the storage key."""
    image_id: int
    product_id: int
    file_name: str
    date_created: datetime
    s3_bucket_path: str

    @classmethod
    def from_model(cls, image) -> "ImageResponse":
        return cls(
            image_id=image.image_id,
            product_id=image.product_id,
            file_name=image.file_name,
            date_created=image.date_created,
            s3_bucket_path=image.storage_key,
        )
