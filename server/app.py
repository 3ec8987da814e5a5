"""
FastAPI application setup and configuration.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import get_config
from server.middleware import RequestLoggingMiddleware


# =============================================================================
# Constants
# =============================================================================

API_TITLE = "Agent Swarm API"
API_VERSION = "1.0.0"


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(title=API_TITLE, version=API_VERSION)


# =============================================================================
# CORS Configuration
# =============================================================================

# Origins come from cors_origins in swarm.jsonc. The default ["*"] suits a
# local tool; restrict it before exposing the server on a network.
cors_origins = get_config().cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware (added after CORS so it runs first)
app.add_middleware(RequestLoggingMiddleware)
