"""
Default ASGI entry point (``uvicorn task_tracker.main:app``).

Importing this module builds an application from environment settings, which
opens the configured store. Code that only needs the factory imports it from
task_tracker.application instead.
"""
from __future__ import annotations

from .application import configure_logging, create_app, openapi_tags  # noqa: F401

app = create_app()
