"""
FastAPI application entry point.

Run with: uvicorn api.main:app --reload
"""
import logging
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables from backend/.env (optional) before other imports that read env
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(env_path)

from api.routes import places
from db import init_db
from settings import settings

logging.basicConfig(level=settings.LOG_LEVEL)

# Create app
app = FastAPI(
    title="Zip-City Lookup API",
    description="Postal-code lookup and autocomplete for US, Canada and Mexico",
    version="0.1.0",
)

# CORS middleware for browser form autocomplete
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type"],
    max_age=86400,
)

app.include_router(places.router, tags=["places"])


@app.on_event("startup")
def startup_event():
    """Initialize database tables when serving from SQLite."""
    if settings.PLACES_SOURCE == "database":
        init_db()


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Zip-City Lookup API"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
