"""
FastAPI app factory.

Responsibilities:
- Create and configure FastAPI app
- Set up middleware
- Initialize shared resources (session factory)
- Register routes
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import AppConfig
from observability import logger
from session.factory import SessionFactory, build_session_factory

from server.routes import register_routes


def create_app(
    config: AppConfig | None = None,
    session_factory: SessionFactory | None = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    This is the app factory pattern that allows:
    - Testing with fake devices and speech sessions
    - Environment-specific setup
    - ASGI server compatibility
    """
    config = config or AppConfig.load_from_env()
    logger.set_enabled(config.enable_json_logs)

    app = FastAPI(title="Walkie-Talkie Relay")

    app.state.config = config

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Built once per process; each host connection gets fresh components
    app.state.session_factory = session_factory or build_session_factory(config)

    # Routes
    register_routes(app)

    return app
