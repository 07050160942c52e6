from sqlalchemy import Column, String, Float, DateTime
from sqlalchemy.sql import func

from app.database import Base
from app.utils.object_id import generate_object_id


class Product(Base):
    """
    Product model, the only resource exposed by the API.

    Attributes:
        id: 24-character hexadecimal identifier, generated on creation
        name: Product name (required, at most 128 characters)
        price: Product price (optional)
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    # Attribute -> column mapping is spelled out for every field
    id = Column("id", String(24), primary_key=True, default=generate_object_id)
    name = Column("name", String(128), nullable=False, index=True)
    price = Column("price", Float, nullable=True)
    created_at = Column("created_at", DateTime(timezone=True), server_default=func.now())
    updated_at = Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Fields a client may set through create/replace/update
    SETTABLE_FIELDS = ("name", "price")

    def transform(self) -> dict:
        """Externally visible shape of a product, shared by every read path."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "createdAt": self.created_at,
        }

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
