"""Run the Task Tracker API with uvicorn: ``python -m task_tracker``."""
from __future__ import annotations

import uvicorn

from .application import configure_logging, create_app
from .settings import get_settings


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
