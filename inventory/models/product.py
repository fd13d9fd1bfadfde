from sqlalchemy import Column, Integer, Text, CheckConstraint

from inventory.contract import ProductEntry
from inventory.database import Base


class Product(Base):
    """
    Product model representing one catalog entry.

    Attributes:
        id: Unique identifier, stored in the ``_id`` column
        name: Product name
        supplier_name: Name of the supplier
        supplier_phone: Supplier's phone number
        price: Unit price in minor currency units (must be non-negative)
        quantity: Units in stock (must be non-negative)
    """
    __tablename__ = ProductEntry.TABLE_NAME

    id = Column(ProductEntry.ID, Integer, primary_key=True, autoincrement=True)
    name = Column(ProductEntry.COLUMN_NAME, Text, nullable=False)
    supplier_name = Column(ProductEntry.COLUMN_SUPPLIER_NAME, Text, nullable=False)
    supplier_phone = Column(ProductEntry.COLUMN_SUPPLIER_PHONE, Text, nullable=False)
    price = Column(ProductEntry.COLUMN_PRICE, Integer, nullable=False, server_default="0")
    quantity = Column(ProductEntry.COLUMN_QUANTITY, Integer, nullable=False, server_default="0")

    # Database-level constraints so writes that skip validation still fail
    __table_args__ = (
        CheckConstraint("price >= 0", name="check_price_non_negative"),
        CheckConstraint("quantity >= 0", name="check_quantity_non_negative"),
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', quantity={self.quantity})>"
