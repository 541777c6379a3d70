"""ASGI entrypoint: `uvicorn marketplace.api.main:app` or `python -m marketplace.api.main`."""

from __future__ import annotations

import uvicorn

from marketplace.api.api_config import get_api_config
from marketplace.api.app import create_app

app = create_app()


if __name__ == "__main__":
    config = get_api_config()
    uvicorn.run(app, host=config.host, port=config.port)
