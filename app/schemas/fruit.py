import uuid
from pydantic import BaseModel, Field


class FruitCreateRequest(BaseModel):
    """Schema for creating a fruit in storage."""
    name: str = Field(..., min_length=1, max_length=50, description="Unique fruit name (e.g., lemon).")
    description: str = Field(..., min_length=1, max_length=30, description="Short description of the fruit.")
    limit: int = Field(..., ge=0, description="Maximum amount that can be stored.")


class FruitUpdateRequest(BaseModel):
    """Schema for updating description and storage limit."""
    description: str = Field(..., min_length=1, max_length=30)
    limit: int = Field(..., ge=0)


class FruitAmountRequest(BaseModel):
    """Schema for storing or removing an amount of fruit."""
    amount: int = Field(..., ge=0)


class FruitResponse(BaseModel):
    """Schema for fetching a fruit."""
    id: uuid.UUID
    name: str
    description: str
    limit: int
    amount: int
