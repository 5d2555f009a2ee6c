"""
Task Tracker backend package.

The FastAPI application factory lives in task_tracker.application; task_tracker.main
holds ``app``, built from environment settings for uvicorn.
"""

__version__ = "0.1.0"
