"""Section domain model"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, field_validator

# The "no section" bucket is never persisted; filters and drop targets use this id for it
NO_SECTION = "no-section"


class SectionBase(BaseModel):
    """Base section fields"""
    name: str
    include_in_focus_mode: bool = True

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("section name must not be empty")
        return value


class SectionCreate(SectionBase):
    """Section creation model"""
    user_id: str


class SectionUpdate(BaseModel):
    """Section update model - all fields optional"""
    name: Optional[str] = None
    include_in_focus_mode: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("section name must not be empty")
        return value


class Section(SectionBase):
    """Complete section model"""
    id: str
    user_id: str
    order: float = 0
    created_at: datetime

    class Config:
        from_attributes = True

    @field_validator("created_at")
    @classmethod
    def ensure_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def sort_key(self):
        return (self.order, self.created_at, self.id)
