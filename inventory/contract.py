"""
Names shared by the data layer and its consumers.

Content URIs have the form ``content://<authority>/inventory`` for the whole
product collection and ``content://<authority>/inventory/<id>`` for a single
product. The authority identifies the deploying application and comes from
settings (``CONTENT_AUTHORITY``).
"""

SCHEME = "content"
PATH_INVENTORY = "inventory"

CURSOR_DIR_BASE_TYPE = "vnd.cursor.dir"
CURSOR_ITEM_BASE_TYPE = "vnd.cursor.item"


class ProductEntry:
    """Table and column names of the inventory table."""

    TABLE_NAME = "inventory"

    ID = "_id"
    COLUMN_NAME = "name"
    COLUMN_SUPPLIER_NAME = "supplier_name"
    COLUMN_SUPPLIER_PHONE = "supplier_phone"
    COLUMN_PRICE = "price"
    COLUMN_QUANTITY = "quantity"

    ALL_COLUMNS = (
        ID,
        COLUMN_NAME,
        COLUMN_SUPPLIER_NAME,
        COLUMN_SUPPLIER_PHONE,
        COLUMN_PRICE,
        COLUMN_QUANTITY,
    )


def base_content_uri(authority: str) -> str:
    return f"{SCHEME}://{authority}"


def content_uri(authority: str) -> str:
    """URI of the product collection."""
    return f"{base_content_uri(authority)}/{PATH_INVENTORY}"


def item_uri(authority: str, product_id: int) -> str:
    """URI of a single product."""
    return with_appended_id(content_uri(authority), product_id)


def with_appended_id(uri: str, row_id: int) -> str:
    return f"{uri.rstrip('/')}/{row_id}"


def content_list_type(authority: str) -> str:
    return f"{CURSOR_DIR_BASE_TYPE}/{authority}/{PATH_INVENTORY}"


def content_item_type(authority: str) -> str:
    return f"{CURSOR_ITEM_BASE_TYPE}/{authority}/{PATH_INVENTORY}"
