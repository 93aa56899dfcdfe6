"""Category domain model"""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator


class CategoryColor(str, Enum):
    """Color keys understood by the client palette"""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    PURPLE = "purple"
    PINK = "pink"
    INDIGO = "indigo"
    GRAY = "gray"


class CategoryBase(BaseModel):
    """Base category fields"""
    name: str
    color: CategoryColor = CategoryColor.GRAY

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("category name must not be empty")
        return value


class CategoryCreate(CategoryBase):
    """Category creation model"""
    user_id: str


class CategoryUpdate(BaseModel):
    """Category update model - all fields optional"""
    name: Optional[str] = None
    color: Optional[CategoryColor] = None


class Category(CategoryBase):
    """Complete category model"""
    id: str
    user_id: str
    created_at: datetime

    class Config:
        from_attributes = True
