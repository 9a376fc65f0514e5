from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from webapp.db.models import User
from webapp.routers.deps import catalog_service, current_account
from webapp.schemas.catalog import ProductPatchRequest, ProductRequest, ProductResponse
from webapp.services.catalog_service import CatalogService, ProductFields, ProductPatch

router = APIRouter(prefix="/v1/product", tags=["products"])


def _fields(payload: ProductRequest) -> ProductFields:
    return ProductFields(
        name=payload.name,
        sku=payload.sku,
        manufacturer=payload.manufacturer,
        quantity=payload.quantity,
        description=payload.description,
    )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProductResponse)
def create_product(
    payload: ProductRequest,
    account: User = Depends(current_account),
    catalog: CatalogService = Depends(catalog_service),
):
    return ProductResponse.from_model(catalog.create_product(account.id, _fields(payload)))


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, catalog: CatalogService = Depends(catalog_service)):
    return ProductResponse.from_model(catalog.get_product(product_id))


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def replace_product(
    product_id: int,
    payload: ProductRequest,
    account: User = Depends(current_account),
    catalog: CatalogService = Depends(catalog_service),
):
    catalog.replace_product(account.id, product_id, _fields(payload))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def patch_product(
    product_id: int,
    payload: ProductPatchRequest,
    account: User = Depends(current_account),
    catalog: CatalogService = Depends(catalog_service),
):
    patch = ProductPatch(
        name=payload.name,
        description=payload.description,
        sku=payload.sku,
        manufacturer=payload.manufacturer,
        quantity=payload.quantity,
    )
    catalog.patch_product(account.id, product_id, patch)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    account: User = Depends(current_account),
    catalog: CatalogService = Depends(catalog_service),
):
    catalog.delete_product(account.id, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
