"""Application settings read from the environment"""
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv(dotenv_path=".env")


class Settings(BaseModel):
    """Runtime configuration"""
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    # "supabase" for the hosted database, "memory" for demo mode and tests
    store_backend: str = "supabase"
    persist_max_retries: int = Field(3, ge=0)
    persist_retry_delay_seconds: float = Field(0.2, ge=0)
    suggestion_model: str = "gpt-4o"
    openai_api_key: Optional[str] = None
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Build settings from environment variables (cached)"""
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_service_role_key=os.getenv("SUPABASE_SERVICE_ROLE_KEY"),
        store_backend=os.getenv("PLANNER_STORE", "supabase"),
        persist_max_retries=int(os.getenv("PERSIST_MAX_RETRIES", "3")),
        persist_retry_delay_seconds=float(os.getenv("PERSIST_RETRY_DELAY_SECONDS", "0.2")),
        suggestion_model=os.getenv("SUGGESTION_MODEL", "gpt-4o"),
        openai_api_key=os.getenv("OPENAI_API_KEY"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
