from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, field_serializer

from menucatalog.models.product import NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH

# Base schema for Product shared properties
class ProductBase(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = Field(min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    price: float = Field(gt=0)
    image: str = Field(min_length=1)
    category: str = Field(min_length=1)

# Schema for creating a new Product
class ProductCreate(ProductBase):
    pass

# Schema for Product in DB (returned to client)
class ProductInDB(ProductBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime = Field(serialization_alias="createdAt")

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        # SQLite hands back naive datetimes; they are stored as UTC
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()

class DeleteAck(BaseModel):
    message: str
    id: str
