"""Technology Research Agent API.

Serves two surfaces:
- The proxy gateway (POST /api/claude) that forwards prompts with a
  server-side credential
- The research API (/v1/research) that runs the four-phase workflow in
  background jobs and serves the resulting artifacts
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from research_agent import __version__
from research_agent.api.routes import gateway, research
from research_agent.config import load_config
from research_agent.executor.db import init_db
from research_agent.executor.history_store import configure_store

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Initializing research database...")
    configure_store(load_config())
    init_db()
    logger.info("Technology Research Agent API ready")
    yield
    logger.info("Shutting down Technology Research Agent API")


app = FastAPI(
    title="Technology Research Agent API",
    description="""
## Technology Research Agent

Runs a four-phase technology research workflow (market research, vendor
analysis, hype cycle positioning, strategic summary) and packages the
results as downloadable artifacts.

### Key Endpoints

- `POST /api/claude` - Proxy a prompt to the completion service
- `POST /v1/research/jobs` - Start a research run
- `GET /v1/research/jobs/{job_id}` - Poll progress and list artifacts
- `GET /v1/research/jobs/{job_id}/artifacts/{key}` - Download an artifact
- `GET /v1/research/history` - Recent analyses
""",
    version=__version__,
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["POST", "GET", "PUT", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(gateway.router)
app.include_router(research.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Technology Research Agent API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "gateway": "/api/claude",
            "jobs": "/v1/research/jobs",
            "history": "/v1/research/history",
            "settings": "/v1/research/settings",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "research_agent.api.main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
    )
