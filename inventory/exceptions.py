class InventoryError(Exception):
    """Base class for errors raised by the inventory data layer."""
    pass


class InvalidUriError(InventoryError):
    """Raised when a URI is neither the collection URI nor an item URI."""
    pass


class UnknownUriError(InvalidUriError):
    """Raised when a MIME type is requested for an unrecognized URI."""
    pass


class UnsupportedOperationError(InventoryError):
    """Raised when a recognized URI does not support the requested operation."""
    pass


class InvalidPayloadError(InventoryError):
    """Raised when a write payload breaks a field invariant."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class InvalidQueryError(InventoryError):
    """Raised for unknown tables, columns or sort terms, or unbound placeholders."""
    pass


class ResultSetClosedError(InventoryError):
    """Raised when a closed result-set is used."""
    pass


class InternalError(InventoryError):
    """Raised when the data layer reaches a state it cannot handle."""
    pass


class StoreFailureError(InventoryError):
    """Raised by consumers when the store refused a write."""
    pass


class ProductNotFoundError(InventoryError):
    """Exception raised when the requested product doesn't exist."""
    pass


class OutOfStockError(InventoryError):
    """Exception raised when a sale is attempted on a product with no stock."""
    pass


class ConcurrentUpdateError(InventoryError):
    """Exception raised when a product keeps changing under a conditional write."""
    pass
