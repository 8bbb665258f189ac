# Entrypoint for running the FastAPI application with uvicorn.

import logging

import uvicorn

from minutesai_backend.settings import get_settings


def main() -> None:
    """Start the FastAPI server using uvicorn."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    uvicorn.run(
        "minutesai_backend.app:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
