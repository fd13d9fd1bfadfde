from inventory.contract import ProductEntry
from inventory.exceptions import InvalidPayloadError
from inventory.schemas.product import ProductValues


REQUIRED_FIELDS = {
    ProductEntry.COLUMN_NAME: "Product requires a name",
    ProductEntry.COLUMN_SUPPLIER_NAME: "Product requires a supplier's name",
    ProductEntry.COLUMN_SUPPLIER_PHONE: "Product requires a supplier's phone",
}

NON_NEGATIVE_FIELDS = {
    ProductEntry.COLUMN_PRICE: "Product requires valid price",
    ProductEntry.COLUMN_QUANTITY: "Product requires valid quantity",
}


def _check_non_negative(values: ProductValues, field: str) -> None:
    # The columns are NOT NULL, so an explicit null is rejected as well
    value = getattr(values, field)
    if value is None or value < 0:
        raise InvalidPayloadError(field, NON_NEGATIVE_FIELDS[field])


def validate_for_insert(values: ProductValues) -> None:
    """
    Check a payload that is about to create a product.

    Name, supplier name and supplier phone must be present and non-null.
    Price and quantity are optional but must be non-negative when given.

    Raises:
        InvalidPayloadError: On the first violated field
    """
    for field, message in REQUIRED_FIELDS.items():
        if getattr(values, field) is None:
            raise InvalidPayloadError(field, message)

    for field in NON_NEGATIVE_FIELDS:
        if field in values.model_fields_set:
            _check_non_negative(values, field)


def validate_for_update(values: ProductValues) -> None:
    """
    Check a partial payload that is about to change existing products.

    Only the fields present in the payload are checked.

    Raises:
        InvalidPayloadError: On the first violated field
    """
    present = values.model_fields_set

    for field, message in REQUIRED_FIELDS.items():
        if field in present and getattr(values, field) is None:
            raise InvalidPayloadError(field, message)

    for field in NON_NEGATIVE_FIELDS:
        if field in present:
            _check_non_negative(values, field)
