from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from webapp.db.models import User
from webapp.routers.deps import catalog_service, current_account
from webapp.schemas.catalog import ImageResponse
from webapp.services.catalog_service import CatalogService, ImageUpload

router = APIRouter(prefix="/v1/product/{product_id}/image", tags=["images"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ImageResponse)
def upload_image(
    product_id: int,
    file: UploadFile = File(...),
    account: User = Depends(current_account),
    catalog: CatalogService = Depends(catalog_service),
):
    limit = catalog.max_upload_bytes
    # one byte past the limit is enough for the service to reject the upload
    data = file.file.read(limit + 1) if limit else file.file.read()
    upload = ImageUpload(file_name=file.filename, content_type=file.content_type, data=data)
    image = catalog.upload_image(account.id, product_id, upload)
    return ImageResponse.from_model(image)


@router.get("", response_model=List[ImageResponse])
def list_images(product_id: int, catalog: CatalogService = Depends(catalog_service)):
    return [ImageResponse.from_model(image) for image in catalog.list_images(product_id)]


@router.get("/{image_id}", response_model=ImageResponse)
def get_image(product_id: int, image_id: int, catalog: CatalogService = Depends(catalog_service)):
    return ImageResponse.from_model(catalog.get_image(product_id, image_id))


@router.delete("/{image_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_image(
    product_id: int,
    image_id: int,
    account: User = Depends(current_account),
    catalog: CatalogService = Depends(catalog_service),
):
    catalog.delete_image(account.id, product_id, image_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
