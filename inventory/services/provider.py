from typing import Any, Optional, Sequence
import logging

from inventory.contract import (
    ProductEntry,
    content_item_type,
    content_list_type,
    content_uri,
    with_appended_id,
)
from inventory.cursor import ResultSet
from inventory.database import InventoryDatabase
from inventory.exceptions import (
    InternalError,
    InvalidUriError,
    UnknownUriError,
    UnsupportedOperationError,
)
from inventory.notifier import ChangeNotifier
from inventory.schemas.product import Payload, as_product_values
from inventory.uri import UriKind, UriMatch, match_uri
from inventory.validation import validate_for_insert, validate_for_update

logger = logging.getLogger(__name__)

ID_SELECTION = f"{ProductEntry.ID} = ?"


class InventoryProvider:
    """
    URI-addressed access to the inventory table.

    Every operation takes a content URI that is classified first:

    - the collection URI addresses all products and passes the caller's
      selection through to the database;
    - an item URI addresses one product; its ID replaces whatever
      selection the caller gave.

    Writes are validated before they reach the database. Successful
    changes are announced through the notifier, and query results are
    tagged with their URI so they can tell when they go stale.

    Store-level failures are not raised: insert returns None and
    update/delete return 0, with the failure logged.
    """

    def __init__(self, database: InventoryDatabase, notifier: ChangeNotifier, authority: str):
        self.database = database
        self.notifier = notifier
        self.authority = authority
        self.content_uri = content_uri(authority)

    def open(self) -> "InventoryProvider":
        self.database.open()
        return self

    def close(self) -> None:
        self.database.close()

    def match(self, uri: str) -> UriMatch:
        return match_uri(uri, self.authority)

    def _item_selection(self, match: UriMatch) -> tuple[str, list]:
        return ID_SELECTION, [match.row_id]

    def _target(
        self,
        uri: str,
        selection: Optional[str],
        selection_args: Optional[Sequence[Any]],
        operation: str,
    ) -> tuple[Optional[str], Optional[Sequence[Any]]]:
        """Resolve the selection a write on ``uri`` applies to."""
        match = self.match(uri)
        if match.kind == UriKind.COLLECTION:
            return selection, selection_args
        if match.kind == UriKind.ITEM:
            return self._item_selection(match)
        if match.kind == UriKind.UNKNOWN:
            raise UnsupportedOperationError(f"{operation} is not supported for {uri}")
        raise InternalError(f"Unexpected match {match!r} for {uri}")

    def query(
        self,
        uri: str,
        projection: Optional[Sequence[str]] = None,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
        sort_order: Optional[str] = None,
    ) -> ResultSet:
        """
        Query products.

        Args:
            uri: Collection or item URI
            projection: Columns to return, all when None
            selection: Predicate with ``?`` placeholders (ignored for item URIs)
            selection_args: Values for the placeholders
            sort_order: ``column [ASC|DESC]`` terms

        Returns:
            ResultSet tagged with ``uri``; the caller must close it

        Raises:
            InvalidUriError: If the URI is not recognized
        """
        match = self.match(uri)
        if match.kind == UriKind.COLLECTION:
            pass
        elif match.kind == UriKind.ITEM:
            selection, selection_args = self._item_selection(match)
        elif match.kind == UriKind.UNKNOWN:
            raise InvalidUriError(f"Cannot query unknown URI {uri}")
        else:
            raise InternalError(f"Unexpected match {match!r} for {uri}")

        result = self.database.query(
            ProductEntry.TABLE_NAME, projection, selection, selection_args, sort_order
        )
        result.set_notification_uri(self.notifier, uri)
        return result

    def insert(self, uri: str, values: Payload) -> Optional[str]:
        """
        Insert a product.

        Args:
            uri: Collection URI
            values: Product fields; name and both supplier fields are required

        Returns:
            URI of the new product, or None if the database rejected the row

        Raises:
            UnsupportedOperationError: If ``uri`` is not the collection URI
            InvalidPayloadError: If the values break a field invariant
        """
        match = self.match(uri)
        if match.kind in (UriKind.ITEM, UriKind.UNKNOWN):
            raise UnsupportedOperationError(f"Insertion is not supported for {uri}")
        if match.kind != UriKind.COLLECTION:
            raise InternalError(f"Unexpected match {match!r} for {uri}")

        product = as_product_values(values)
        validate_for_insert(product)

        row_id = self.database.insert(ProductEntry.TABLE_NAME, product.to_row())
        if row_id == -1:
            logger.error(f"Failed to insert row for {uri}")
            return None

        logger.info(f"Product #{row_id} inserted")
        self.notifier.notify(uri)
        return with_appended_id(uri, row_id)

    def update(
        self,
        uri: str,
        values: Payload,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """
        Update products.

        Only the fields present in ``values`` are changed.

        Returns:
            Number of rows updated

        Raises:
            UnsupportedOperationError: If the URI is not recognized
            InvalidPayloadError: If a present field breaks an invariant
        """
        selection, selection_args = self._target(uri, selection, selection_args, "Update")

        product = as_product_values(values)
        if product.is_empty():
            return 0
        validate_for_update(product)

        rows_updated = self.database.update(
            ProductEntry.TABLE_NAME, product.to_row(), selection, selection_args
        )
        if rows_updated > 0:
            logger.info(f"{rows_updated} row(s) updated for {uri}")
            self.notifier.notify(uri)
        return rows_updated

    def delete(
        self,
        uri: str,
        selection: Optional[str] = None,
        selection_args: Optional[Sequence[Any]] = None,
    ) -> int:
        """
        Delete products; every product for the collection URI without a selection.

        Returns:
            Number of rows deleted

        Raises:
            UnsupportedOperationError: If the URI is not recognized
        """
        selection, selection_args = self._target(uri, selection, selection_args, "Deletion")

        rows_deleted = self.database.delete(ProductEntry.TABLE_NAME, selection, selection_args)
        if rows_deleted > 0:
            logger.info(f"{rows_deleted} row(s) deleted for {uri}")
            self.notifier.notify(uri)
        return rows_deleted

    def get_type(self, uri: str) -> str:
        """
        Return the MIME type of the data at a URI.

        Raises:
            UnknownUriError: If the URI is not recognized
        """
        match = self.match(uri)
        if match.kind == UriKind.COLLECTION:
            return content_list_type(self.authority)
        if match.kind == UriKind.ITEM:
            return content_item_type(self.authority)
        raise UnknownUriError(f"Unknown URI {uri} with match {match.kind.value}")
