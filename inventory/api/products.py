from fastapi import APIRouter, Depends, HTTPException, Path, status

from inventory.api.dependencies import get_catalog_service
from inventory.exceptions import (
    ConcurrentUpdateError,
    InvalidPayloadError,
    OutOfStockError,
    ProductNotFoundError,
    StoreFailureError,
)
from inventory.services.catalog_service import CatalogService
from inventory.uri import MAX_ROW_ID
from inventory.schemas.product import (
    DeleteAllResponse,
    ProductCreate,
    ProductListResponse,
    ProductResponse,
    ProductUpdate,
)

router = APIRouter(prefix="/products", tags=["Products"])


def _invalid_payload(e: InvalidPayloadError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail={"field": e.field, "message": e.message},
    )


def _not_found(product_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Product with ID {product_id} not found"
    )


@router.get(
    "/",
    response_model=ProductListResponse,
    summary="List all products",
    description="Get every product in the catalog, ordered by ID."
)
def list_products(service: CatalogService = Depends(get_catalog_service)):
    """Get the product catalog."""
    products = service.list_products()
    return ProductListResponse(
        items=[ProductResponse(**p) for p in products],
        total=len(products)
    )


@router.post(
    "/",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new product",
    description="Create a product with name, supplier details, price and quantity."
)
def create_product(
    product_data: ProductCreate,
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Create a new product.

    - **name**: Product name (required)
    - **supplier_name**: Supplier's name (required)
    - **supplier_phone**: Supplier's phone (required)
    - **price**: Unit price, must be non-negative (optional, defaults to 0)
    - **quantity**: Units in stock, must be non-negative (optional, defaults to 0)
    """
    try:
        product_id = service.create_product(product_data.model_dump(exclude_unset=True))
    except InvalidPayloadError as e:
        raise _invalid_payload(e)
    except StoreFailureError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
    return service.get_product(product_id)


@router.post(
    "/dummy",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Insert dummy data",
    description="Insert a sample product into the catalog."
)
def insert_dummy_product(service: CatalogService = Depends(get_catalog_service)):
    product_id = service.insert_dummy_product()
    return service.get_product(product_id)


@router.delete(
    "/",
    response_model=DeleteAllResponse,
    summary="Delete all entries",
    description="Delete every product in the catalog."
)
def delete_all_products(service: CatalogService = Depends(get_catalog_service)):
    return DeleteAllResponse(deleted=service.delete_all())


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Get product by ID",
    description="Get detailed information about a specific product."
)
def get_product(
    product_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="Product ID"),
    service: CatalogService = Depends(get_catalog_service)
):
    """Get a product by ID."""
    product = service.get_product(product_id)
    if not product:
        raise _not_found(product_id)
    return product


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_data: ProductUpdate,
    product_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="Product ID"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Update a product.

    Partial updates are supported - only include fields you want to change.
    """
    try:
        return service.update_product(product_id, product_data.model_dump(exclude_unset=True))
    except InvalidPayloadError as e:
        raise _invalid_payload(e)
    except ProductNotFoundError:
        raise _not_found(product_id)


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a product",
    description="Delete a product by ID."
)
def delete_product(
    product_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="Product ID"),
    service: CatalogService = Depends(get_catalog_service)
):
    """Delete a product."""
    try:
        service.delete_product(product_id)
    except ProductNotFoundError:
        raise _not_found(product_id)
    return None


@router.post(
    "/{product_id}/sale",
    response_model=ProductResponse,
    summary="Sell one unit",
    description="Decrease the product's quantity by one."
)
def sell_product(
    product_id: int = Path(..., ge=1, le=MAX_ROW_ID, description="Product ID"),
    service: CatalogService = Depends(get_catalog_service)
):
    """
    Sell one unit of a product.

    Fails with 400 when the product is out of stock, and with 409 when
    concurrent writes kept changing its quantity.
    """
    try:
        return service.sell_one(product_id)
    except ProductNotFoundError:
        raise _not_found(product_id)
    except OutOfStockError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except ConcurrentUpdateError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(e)
        )
