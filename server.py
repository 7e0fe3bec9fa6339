"""
Quiz Assessment Server

FastAPI server exposing the quiz assessment engine:
- Quiz definitions (validated on save)
- Attempt lifecycle (start, autosave answers, submit, review)
- Progress per (user, quiz)
- Persistence via AgentFS KV
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import app_state
from quiz_assessment.config import get_config
from quiz_assessment.router import router as quiz_router

load_dotenv()
config = get_config()
logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
config.configure_logging()
logger = logging.getLogger("server")


# =============================================================================
# FASTAPI APP
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage app lifecycle."""
    logger.info("Starting Quiz Assessment...")
    yield
    await app_state.close()
    logger.info("AgentFS closed")


app = FastAPI(
    title="Quiz Assessment",
    description="Quiz assessment engine: grading, attempts and retake policy",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(quiz_router)


# =============================================================================
# HEALTH ENDPOINTS
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check."""
    return {
        "status": "healthy",
        "agentfs_open": app_state.agentfs is not None,
        "events_enabled": config.events_enabled,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
