# app/__main__.py
"""
Run the API with uvicorn: python -m app
Binds HOST:PORT and gives in-flight requests SHUTDOWN_GRACE_SECONDS to finish on SIGINT/SIGTERM.
"""

import uvicorn

from app.config import settings


def main():
    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        log_level=settings.LOG_LEVEL.lower(),
        timeout_graceful_shutdown=settings.SHUTDOWN_GRACE_SECONDS,
    )


if __name__ == "__main__":
    main()
