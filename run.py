"""Entry point for the CulturePass API.

Starts the FastAPI application under uvicorn.  Host and port are read
from the environment variables ``API_HOST`` and ``API_PORT`` (defaults
``0.0.0.0`` and ``8000``); everything else is configured through the
variables read by ``culturepass_api.app.core.config``.

Usage:
    python run.py
"""
import os

from uvicorn import Config, Server


def main() -> None:
    host = os.getenv("API_HOST", "0.0.0.0")
    port = int(os.getenv("API_PORT", "8000"))
    config = Config(
        app="culturepass_api.app.main:app",
        host=host,
        port=port,
        reload=False,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
    Server(config).run()


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        pass
