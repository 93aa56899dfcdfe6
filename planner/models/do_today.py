"""Do Today off-log model"""
from datetime import date
from typing import Optional

from pydantic import BaseModel


class DoTodayOffEntry(BaseModel):
    """One task switched off "Do Today" for one calendar day"""
    user_id: str
    task_id: str
    off_date: date
    id: Optional[str] = None

    class Config:
        from_attributes = True

    @property
    def key(self) -> str:
        """Composite record key (one row per task per day)"""
        return f"{self.task_id}:{self.off_date.isoformat()}"
