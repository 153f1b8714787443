from typing import Any, Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, field_validator

from godown.models.item import ItemStatus


def _strip_required(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    if not value:
        raise ValueError("must not be empty")
    return value


# --- Godown ---
class GodownCreate(BaseModel):
    id: Optional[str] = Field(None, alias="_id", description="Optional explicit id")
    name: str = Field(..., min_length=1, max_length=200)
    parent_godown: Optional[str] = None

    class Config:
        populate_by_name = True
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        return _strip_required(value)


class GodownUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    parent_godown: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        return _strip_required(value)


class GodownSummary(BaseModel):
    id: str
    name: str
    parent_godown: Optional[str] = None
    is_leaf: bool = True


class GodownDetail(GodownSummary):
    owner: int
    created_at: datetime
    updated_at: datetime


class GodownDeleteResponse(BaseModel):
    message: str
    godown: GodownDetail


class FilterOptionsResponse(BaseModel):
    brands: List[str]
    categories: List[str]


# --- Item ---
class ItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    quantity: int = Field(..., ge=0)
    category: str = Field(..., min_length=1, max_length=100)
    price: float = Field(..., ge=0)
    status: ItemStatus = ItemStatus.IN_STOCK
    godown_id: str
    brand: str = Field(..., min_length=1, max_length=100)
    attributes: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None

    @field_validator("name", "category", "brand")
    @classmethod
    def strip_text(cls, value):
        return _strip_required(value)


class ItemCreate(ItemBase):
    class Config:
        extra = "forbid"


class ItemUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    quantity: Optional[int] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[float] = Field(None, ge=0)
    status: Optional[ItemStatus] = None
    godown_id: Optional[str] = None
    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    attributes: Optional[Dict[str, Any]] = None
    image_url: Optional[str] = None

    class Config:
        extra = "forbid"

    @field_validator("name", "category", "brand")
    @classmethod
    def strip_text(cls, value):
        return _strip_required(value)


class ItemResponse(ItemBase):
    id: str
    created_at: datetime
    updated_at: datetime


class ItemWithGodown(ItemResponse):
    godown: GodownSummary


class ItemDeleteResponse(BaseModel):
    message: str
    item: ItemResponse


class MoveItemRequest(BaseModel):
    itemId: str
    toLocationId: str


class MoveItemResponse(BaseModel):
    message: str
    item: ItemWithGodown


# --- Hierarchy ---
class GodownNode(GodownSummary):
    items: List[ItemResponse] = []
    sub_godowns: List["GodownNode"] = []


GodownNode.model_rebuild()


# --- Auth ---
class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=7)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        return _strip_required(value)

    @field_validator("password")
    @classmethod
    def password_without_keyword(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 7:
            raise ValueError("Password must be at least 7 characters long")
        if "password" in value.lower():
            raise ValueError('Password cannot contain the word "password"')
        return value


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    is_active: bool = True
    created_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    token_type: str


class AuthResponse(BaseModel):
    user: UserResponse
    token: str
