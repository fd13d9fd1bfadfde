from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError
from typing import Any, Mapping, Optional, Union

from inventory.exceptions import InvalidPayloadError


class ProductValues(BaseModel):
    """
    Partial product record used as a write payload.

    Every field is optional. A field left out of the payload is absent;
    a field passed as None is an explicit null. The two are told apart
    through ``model_fields_set``.
    """
    name: Optional[str] = Field(None, description="Product name")
    supplier_name: Optional[str] = Field(None, description="Supplier's name")
    supplier_phone: Optional[str] = Field(None, description="Supplier's phone")
    price: Optional[StrictInt] = Field(None, description="Unit price in minor currency units")
    quantity: Optional[StrictInt] = Field(None, description="Units in stock")

    model_config = ConfigDict(extra="forbid")

    def is_empty(self) -> bool:
        return not self.model_fields_set

    def to_row(self) -> dict:
        """Column values for the fields present in the payload."""
        return self.model_dump(exclude_unset=True)


Payload = Union[ProductValues, Mapping[str, Any]]


def as_product_values(payload: Optional[Payload]) -> ProductValues:
    """
    Convert a caller payload into ProductValues.

    Raises:
        InvalidPayloadError: If a key is unknown or a value has the wrong type
    """
    if payload is None:
        return ProductValues()
    if isinstance(payload, ProductValues):
        return payload
    try:
        return ProductValues.model_validate(dict(payload))
    except ValidationError as e:
        error = e.errors()[0]
        field = str(error["loc"][0]) if error["loc"] else "payload"
        raise InvalidPayloadError(field, f"Invalid value for {field}: {error['msg']}")


class ProductCreate(BaseModel):
    """Schema for creating a new product."""
    name: Optional[str] = Field(None, description="Product name (required)")
    supplier_name: Optional[str] = Field(None, description="Supplier's name (required)")
    supplier_phone: Optional[str] = Field(None, description="Supplier's phone (required)")
    price: Optional[StrictInt] = Field(None, description="Unit price, defaults to 0")
    quantity: Optional[StrictInt] = Field(None, description="Units in stock, defaults to 0")


class ProductUpdate(ProductCreate):
    """Schema for updating an existing product. Only provided fields are updated."""
    pass


class ProductResponse(BaseModel):
    """Schema for product response including all fields."""
    id: int
    name: str
    supplier_name: str
    supplier_phone: str
    price: int
    quantity: int


class ProductListResponse(BaseModel):
    """Schema for product list response."""
    items: list[ProductResponse]
    total: int


class DeleteAllResponse(BaseModel):
    deleted: int
