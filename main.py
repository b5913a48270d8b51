"""
Question Paper Builder API — Main Application
FastAPI application for assembling exam papers: metadata and section
blueprint, question building with optional AI drafting, and a reconciled
read-only view for the print renderer.
"""

from dotenv import load_dotenv
load_dotenv()

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import generation, paper, session
from services.workspace import get_workspace

logging.basicConfig(level=logging.INFO, format="%(asctime)s  %(levelname)s  %(message)s")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: look for an autosaved paper to offer for restore."""
    get_workspace().startup()
    yield


app = FastAPI(
    title="Question Paper Builder API",
    description="Exam paper blueprint, question builder and AI content generation",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ─── Routers ───────────────────────────────────────────────────────────────────

app.include_router(session.router)      # /session/*
app.include_router(paper.router)        # /paper/*
app.include_router(generation.router)   # /generation/*


@app.get("/")
def root():
    return {
        "name": "Question Paper Builder API",
        "version": "1.0.0",
        "endpoints": {
            "docs": "/docs",
            "session": "/session",
            "paper": "/paper",
            "generation": "/generation",
        },
    }


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "question-paper-builder"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
