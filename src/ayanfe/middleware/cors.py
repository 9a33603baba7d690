"""CORS for the AYANFE chat web client."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ayanfe.config import Settings

# Headers the chat client reads from API responses
_EXPOSED_HEADERS = ["X-Request-Id", "X-Response-Time-Ms", "X-RateLimit-Remaining", "X-RateLimit-Limit"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    # Browsers reject credentialed requests against a wildcard origin
    wildcard = "*" in settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=not wildcard,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-Id"],
        expose_headers=_EXPOSED_HEADERS,
        max_age=600,
    )
