from typing import List, Optional
import logging

from inventory.contract import ProductEntry, item_uri
from inventory.exceptions import (
    ConcurrentUpdateError,
    OutOfStockError,
    ProductNotFoundError,
    StoreFailureError,
)
from inventory.schemas.product import Payload
from inventory.services.provider import InventoryProvider
from inventory.uri import match_uri

logger = logging.getLogger(__name__)

MAX_SALE_ATTEMPTS = 5
SALE_SELECTION = f"{ProductEntry.ID} = ? AND {ProductEntry.COLUMN_QUANTITY} = ?"


DUMMY_PRODUCT = {
    ProductEntry.COLUMN_NAME: "Harry Potter",
    ProductEntry.COLUMN_SUPPLIER_NAME: "Magic BookPrint",
    ProductEntry.COLUMN_SUPPLIER_PHONE: "+48 888 888 888",
    ProductEntry.COLUMN_PRICE: 20,
    ProductEntry.COLUMN_QUANTITY: 50,
}


def _as_product(row: dict) -> dict:
    product = dict(row)
    product["id"] = product.pop(ProductEntry.ID)
    return product


class CatalogService:
    """
    Catalog operations offered to the end user.

    This service handles:
    - Listing products
    - Creating and editing products
    - Selling one unit of a product
    - Inserting sample data and clearing the catalog

    It only talks to the data layer through content URIs.
    """

    def __init__(self, provider: InventoryProvider):
        self.provider = provider

    def _item_uri(self, product_id: int) -> str:
        return item_uri(self.provider.authority, product_id)

    def list_products(self) -> List[dict]:
        """Get every product, ordered by ID."""
        with self.provider.query(
            self.provider.content_uri,
            projection=ProductEntry.ALL_COLUMNS,
            sort_order=f"{ProductEntry.ID} ASC",
        ) as result:
            return [_as_product(row) for row in result]

    def get_product(self, product_id: int) -> Optional[dict]:
        """
        Get a product by ID.

        Returns:
            Product fields or None if not found
        """
        with self.provider.query(
            self._item_uri(product_id), projection=ProductEntry.ALL_COLUMNS
        ) as result:
            if not result.move_to_first():
                return None
            return _as_product(result.row())

    def create_product(self, values: Payload) -> int:
        """
        Create a new product.

        Returns:
            ID of the created product

        Raises:
            InvalidPayloadError: If a required field is missing or a number is negative
            StoreFailureError: If the database refused the row
        """
        new_uri = self.provider.insert(self.provider.content_uri, values)
        if new_uri is None:
            raise StoreFailureError("Error with saving product")

        product_id = match_uri(new_uri, self.provider.authority).row_id
        logger.info(f"Product #{product_id} created")
        return product_id

    def update_product(self, product_id: int, values: Payload) -> dict:
        """
        Update an existing product. Only the given fields change.

        Returns:
            Updated product

        Raises:
            ProductNotFoundError: If the product doesn't exist
            InvalidPayloadError: If a given field breaks an invariant
        """
        self.provider.update(self._item_uri(product_id), values)

        product = self.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")
        return product

    def delete_product(self, product_id: int) -> None:
        """
        Delete a product.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        if self.provider.delete(self._item_uri(product_id)) == 0:
            raise ProductNotFoundError(f"Product with ID {product_id} not found")
        logger.info(f"Product #{product_id} deleted")

    def sell_one(self, product_id: int) -> dict:
        """
        Sell one unit of a product.

        The decrement is a conditional write on the quantity that was read,
        so concurrent sales never overwrite each other. A lost race re-reads
        and tries again.

        Returns:
            Product after the sale

        Raises:
            ProductNotFoundError: If the product doesn't exist
            OutOfStockError: If the product has no units left
            ConcurrentUpdateError: If the quantity kept changing on every attempt
        """
        for attempt in range(1, MAX_SALE_ATTEMPTS + 1):
            product = self.get_product(product_id)
            if product is None:
                raise ProductNotFoundError(f"Product with ID {product_id} not found")

            quantity = product[ProductEntry.COLUMN_QUANTITY]
            if quantity <= 0:
                raise OutOfStockError(f"Product with ID {product_id} is out of stock")

            rows_updated = self.provider.update(
                self.provider.content_uri,
                {ProductEntry.COLUMN_QUANTITY: quantity - 1},
                SALE_SELECTION,
                [product_id, quantity],
            )
            if rows_updated == 1:
                logger.info(f"Sold one unit of product #{product_id}, {quantity - 1} left")
                product[ProductEntry.COLUMN_QUANTITY] = quantity - 1
                return product

            logger.warning(
                f"Sale of product #{product_id} lost a race (attempt {attempt}), retrying"
            )

        raise ConcurrentUpdateError(
            f"Product with ID {product_id} changed during sale, try again"
        )

    def insert_dummy_product(self) -> int:
        """Insert a sample product, for trying the catalog out."""
        return self.create_product(DUMMY_PRODUCT)

    def delete_all(self) -> int:
        """
        Delete every product.

        Returns:
            Number of products deleted
        """
        rows_deleted = self.provider.delete(self.provider.content_uri)
        logger.info(f"{rows_deleted} rows deleted from inventory database")
        return rows_deleted
