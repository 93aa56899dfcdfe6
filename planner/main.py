import logging
import os

# Log configuration (before other imports)
# ruff: noqa: E402
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    force=True
)

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from planner.api.base import api_router  # noqa: E402

app = FastAPI(
    title="Planner Backend API",
    description="Backend API for the daily planner - tasks, sections, recurring tasks and Focus Mode",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Specify your frontend URL in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all API routes
app.include_router(api_router)


@app.get("/")
def read_root():
    return {
        "message": "Planner Backend API",
        "docs": "/docs",
        "version": "1.0.0"
    }
