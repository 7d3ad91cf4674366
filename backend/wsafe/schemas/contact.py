"""Emergency contact schemas."""

from pydantic import BaseModel, Field


class ContactCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=3, max_length=32, pattern=r"^\+?[0-9][0-9 ()\-]*$")


class ContactResponse(BaseModel):
    id: int
    name: str
    phone: str
    is_primary: bool = False

    model_config = {"from_attributes": True}
