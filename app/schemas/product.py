from pydantic import BaseModel, Field, ConfigDict, field_validator
from datetime import datetime
from typing import Optional


class ProductCreate(BaseModel):
    """Schema for creating a product. Unknown keys such as `id` are ignored."""
    name: str = Field(..., min_length=1, max_length=128, description="Product name")
    price: Optional[float] = Field(None, allow_inf_nan=False, description="Product price")


class ProductReplace(ProductCreate):
    """Schema for replacing a whole product. Omitted optional fields are cleared."""
    pass


class ProductUpdate(BaseModel):
    """Schema for updating an existing product. All fields are optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=128, description="Product name")
    price: Optional[float] = Field(None, allow_inf_nan=False, description="Product price")

    @field_validator("name")
    @classmethod
    def name_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("name may not be null")
        return value


class ProductResponse(BaseModel):
    """Externally visible product: `{id, name, price, createdAt}`."""
    id: str
    name: str
    price: Optional[float] = None
    created_at: Optional[datetime] = Field(None, alias="createdAt")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
